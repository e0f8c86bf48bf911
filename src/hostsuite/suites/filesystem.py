"""FileSystem integration suite."""
from __future__ import annotations

import time

from hostsuite.core.builder import SuiteBuilder

NAME = "filesystem"
DESCRIPTION = "Sandboxed file, directory and download operations"

AVATAR_URL = "https://s3-us-west-1.amazonaws.com/test-suite-data/avatar2.png"
AVATAR_MD5 = "1e02045c10b8f1145edc7c8375998f87"
AVATAR_SIZE = 3230
TEXT_URL = "https://s3-us-west-1.amazonaws.com/test-suite-data/text-file.txt"
TEXT_MD5 = "86d73d2f11e507365f7ea8e7ec3cc4cb"
TEXT_CONTENTS = "hello, world\nthis is a test file\n"

DOWNLOAD_TIMEOUT = 9.0


def register(t: SuiteBuilder) -> None:
    fs = t.host.filesystem
    expect = t.expect

    async def assert_exists(path: str, expected: bool) -> None:
        info = await fs.get_info(path)
        if expected:
            expect(info.exists).to_be_truthy()
        else:
            expect(info.exists).not_.to_be_truthy()

    def body() -> None:
        @t.it(
            "delete(idempotent) -> !exists -> download(md5, uri) -> exists -> delete -> !exists",
            timeout=DOWNLOAD_TIMEOUT,
            tags=("network",),
        )
        async def download_then_delete() -> None:
            filename = "download1.png"
            await fs.delete(filename, idempotent=True)
            await assert_exists(filename, False)

            result = await fs.download(AVATAR_URL, filename, md5=True)
            expect(result.md5).to_be(AVATAR_MD5)
            expect(result.uri[-len(filename):]).to_be(filename)
            await assert_exists(filename, True)
            info = await fs.get_info(filename)
            expect(info.size).to_be(AVATAR_SIZE)

            await fs.delete(filename)
            await assert_exists(filename, False)

        @t.it("delete(idempotent) -> delete[error]")
        async def delete_missing_fails() -> None:
            filename = "willDelete.png"
            await fs.delete(filename, idempotent=True)
            error = await t.rejects(fs.delete(filename))
            expect(str(error)).to_match(r"not.*found")

        @t.it(
            "download(md5, uri) -> read -> delete -> !exists -> read[error]",
            timeout=DOWNLOAD_TIMEOUT,
            tags=("network",),
        )
        async def download_then_read() -> None:
            filename = "download1.txt"
            result = await fs.download(TEXT_URL, filename, md5=True)
            expect(result.md5).to_be(TEXT_MD5)

            expect(await fs.read_as_string(filename)).to_be(TEXT_CONTENTS)

            await fs.delete(filename, idempotent=True)
            await assert_exists(filename, False)
            await t.rejects(fs.read_as_string(filename))

        @t.it("delete(idempotent) -> !exists -> write -> read -> write -> read")
        async def write_read_round_trip() -> None:
            filename = "write1.txt"
            await fs.delete(filename, idempotent=True)
            await assert_exists(filename, False)

            for expected in ("hello, world", "hello, world!!!!!!", "", "line one\nline two\n"):
                await fs.write_as_string(filename, expected)
                expect(await fs.read_as_string(filename)).to_be(expected)

        @t.it("delete(new) -> 2 * [write -> move -> !exists(orig) -> read(new)]")
        async def move_overwrites() -> None:
            source, destination = "from.txt", "to.txt"
            await fs.delete(destination, idempotent=True)
            # twice, so the second move overwrites
            for contents in ("contents 1", "contents 2"):
                await fs.write_as_string(source, contents)
                await fs.move(source, destination)
                await assert_exists(source, False)
                expect(await fs.read_as_string(destination)).to_be(contents)

        @t.it("delete(new) -> 2 * [write -> copy -> exists(orig) -> read(new)]")
        async def copy_overwrites() -> None:
            source, destination = "from.txt", "to.txt"
            await fs.delete(destination, idempotent=True)
            for contents in ("contents 1", "contents 2"):
                await fs.write_as_string(source, contents)
                await fs.copy(source, destination)
                await assert_exists(source, True)
                expect(await fs.read_as_string(destination)).to_be(contents)

        @t.it(
            "delete(dir) -> write(dir/file)[error] -> mkdir(dir) -> mkdir(dir)[error] "
            "-> write(dir/file) -> read"
        )
        async def make_directory_once() -> None:
            path, directory, contents = "dir/file", "dir", "hello, world"
            await fs.delete(directory, idempotent=True)

            await t.rejects(fs.write_as_string(path, contents))
            await fs.make_directory(directory)
            await t.rejects(fs.make_directory(directory))

            await fs.write_as_string(path, contents)
            expect(await fs.read_as_string(path)).to_be(contents)

        @t.it(
            "delete(dir) -> write(dir/dir2/file)[error] -> mkdir(dir/dir2, intermediates) "
            "-> mkdir(dir/dir2)[error] -> write(dir/dir2/file) -> read"
        )
        async def make_directory_with_intermediates() -> None:
            path, directory, contents = "dir/dir2/file", "dir/dir2", "hello, world"
            await fs.delete("dir", idempotent=True)

            await t.rejects(fs.write_as_string(path, contents))
            await t.rejects(fs.make_directory(directory))
            await fs.make_directory(directory, intermediates=True)
            await fs.make_directory(directory, intermediates=True)
            await t.rejects(fs.make_directory(directory))

            await fs.write_as_string(path, contents)
            expect(await fs.read_as_string(path)).to_be(contents)

        @t.it("delete(dir, idempotent) -> make tree -> check contents -> check directory listings")
        async def directory_tree_listing() -> None:
            await fs.delete("dir", idempotent=True)
            await fs.make_directory("dir/child1", intermediates=True)
            await fs.make_directory("dir/child2", intermediates=True)

            files = {
                "dir/file1": "contents1",
                "dir/file2": "contents2",
                "dir/child1/file3": "contents3",
                "dir/child2/file4": "contents4",
                "dir/child2/file5": "contents5",
            }
            for path, contents in files.items():
                await fs.write_as_string(path, contents)
            for path, contents in files.items():
                expect(await fs.read_as_string(path)).to_be(contents)

            async def check_directory(path: str, expected: list) -> None:
                listing = await fs.read_directory(path)
                expect(sorted(listing)).to_equal(sorted(expected))

            await check_directory("dir", ["file1", "file2", "child1", "child2"])
            await check_directory("dir/child1", ["file3"])
            await check_directory("dir/child2", ["file4", "file5"])
            await t.rejects(check_directory("dir/file1", ["nope"]))

        @t.it(
            "delete(idempotent) -> download(md5) -> getInfo(size)",
            timeout=DOWNLOAD_TIMEOUT,
            tags=("network",),
        )
        async def download_reports_size() -> None:
            filename = "download1.png"
            await fs.delete(filename, idempotent=True)

            result = await fs.download(AVATAR_URL, filename, md5=True)
            expect(result.md5).to_be(AVATAR_MD5)

            info = await fs.get_info(filename)
            expect(info.size).to_be(AVATAR_SIZE)
            expect(time.time() - info.modification_time).to_be_less_than(3600)

            await fs.delete(filename)

        @t.it("throws out-of-scope exceptions")
        async def rejects_paths_outside_sandbox() -> None:
            outside = "../hello/world"
            await t.rejects(fs.get_info(outside))
            await t.rejects(fs.read_as_string(outside))
            await t.rejects(fs.write_as_string(outside, ""))
            await t.rejects(fs.delete(outside))
            await t.rejects(fs.move("../a/b", "c"))
            await t.rejects(fs.move("c", "../a/b"))
            await t.rejects(fs.copy("../a/b", "c"))
            await t.rejects(fs.copy("c", "../a/b"))
            await t.rejects(fs.make_directory(outside))
            await t.rejects(fs.read_directory(outside))
            await t.rejects(fs.download("http://www.google.com", outside))

    t.describe("FileSystem", body)
