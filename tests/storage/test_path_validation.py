"""
Tests for path validation and listing filter helpers, dood!

Every storage operation runs its path through validatePath before any
backend is touched, so these rules are the first line of defence.
"""

import datetime

import pytest

from fshandler.storage.exceptions import StoragePathError
from fshandler.storage.models import FileMetadata
from fshandler.storage.utils import (
    applyFilter,
    baseName,
    globFilter,
    isInside,
    parentPrefix,
    validateFilePath,
    validateNewName,
    validatePath,
)


def makeEntry(name: str, isDirectory: bool = False) -> FileMetadata:
    now = datetime.datetime.now(datetime.timezone.utc)
    return FileMetadata(
        name=name,
        path=name,
        size=0,
        creationTime=now,
        lastModifiedTime=now,
        isDirectory=isDirectory,
    )


class TestValidatePath:
    """Test validatePath accepts relative paths and rejects the rest, dood!"""

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("a.txt", "a.txt"),
            ("docs/a.txt", "docs/a.txt"),
            ("docs//a.txt", "docs/a.txt"),
            ("./docs/./a.txt", "docs/a.txt"),
            ("tmp/", "tmp/"),
            ("deep/nested/dir/", "deep/nested/dir/"),
            ("file..name.txt", "file..name.txt"),
            ("..hidden", "..hidden"),
        ],
    )
    def testAcceptsRelativePaths(self, path, expected):
        """Test that valid relative paths are normalized"""
        assert validatePath(path) == expected

    @pytest.mark.parametrize(
        "path",
        [
            "/etc/passwd",
            "\\windows\\system32",
            "C:\\data\\a.txt",
            "c:/data/a.txt",
        ],
    )
    def testRejectsAbsolutePaths(self, path):
        """Test that absolute paths are rejected"""
        with pytest.raises(StoragePathError, match="absolute"):
            validatePath(path)

    @pytest.mark.parametrize(
        "path",
        [
            "..",
            "../etc/passwd",
            "docs/../../secret",
            "docs/..",
            "docs\\..\\secret",
        ],
    )
    def testRejectsTraversal(self, path):
        """Test that .. segments are rejected"""
        with pytest.raises(StoragePathError, match="traversal"):
            validatePath(path)

    @pytest.mark.parametrize("path", ["a\x00b", "docs/\x1fname", "bad\x7f"])
    def testRejectsControlCharacters(self, path):
        """Test that null bytes and control characters are rejected"""
        with pytest.raises(StoragePathError, match="control"):
            validatePath(path)

    @pytest.mark.parametrize("path", [None, "", ".", "./", "//"])
    def testEmptyPathRejectedByDefault(self, path):
        """Test that an empty path is rejected for mandatory paths"""
        with pytest.raises(StoragePathError):
            validatePath(path)

    @pytest.mark.parametrize("path", [None, "", ".", "./"])
    def testEmptyPathIsRootWhenAllowed(self, path):
        """Test that empty paths mean the root for read-type operations"""
        assert validatePath(path, allowRoot=True) == ""

    def testAllowRootStillRejectsTraversal(self):
        """Test that allowRoot does not relax other rules"""
        with pytest.raises(StoragePathError):
            validatePath("../x", allowRoot=True)


class TestValidateNewName:
    """Test rename target validation, dood!"""

    def testAcceptsPlainName(self):
        """Test that a simple name is returned unchanged"""
        assert validateNewName("b.txt") == "b.txt"

    @pytest.mark.parametrize("newName", ["", None, "a/b", "..", "x..y", "../up"])
    def testRejectsInvalidNames(self, newName):
        """Test that empty names and names with / or .. are rejected"""
        with pytest.raises(StoragePathError):
            validateNewName(newName)


class TestValidateFilePath:
    """Test file path validation, dood!"""

    def testAcceptsFilePath(self):
        """Test a plain file path is normalized like any other path"""
        assert validateFilePath("docs//./a.txt") == "docs/a.txt"

    @pytest.mark.parametrize("path", ["a/", "docs/a.txt/", "docs/./"])
    def testRejectsTrailingSlash(self, path):
        """Test a directory-style path cannot name a file"""
        with pytest.raises(StoragePathError):
            validateFilePath(path)

    @pytest.mark.parametrize("path", ["", ".", None, "../a.txt"])
    def testRejectsInvalidPaths(self, path):
        """Test the root and traversal are rejected as file paths"""
        with pytest.raises(StoragePathError):
            validateFilePath(path)


class TestPathHelpers:
    """Test parentPrefix, baseName and isInside, dood!"""

    def testParentPrefix(self):
        """Test parent prefix keeps the trailing slash"""
        assert parentPrefix("docs/sub/a.txt") == "docs/sub/"
        assert parentPrefix("a.txt") == ""

    def testBaseName(self):
        """Test final segment extraction, ignoring a trailing slash"""
        assert baseName("docs/sub/a.txt") == "a.txt"
        assert baseName("docs/sub/") == "sub"
        assert baseName("top") == "top"
        assert baseName("") == ""

    def testIsInside(self):
        """Test containment compares whole segments"""
        assert isInside("docs/sub/a.txt", "docs")
        assert isInside("docs/sub/", "docs/")
        assert not isInside("docs", "docs")
        assert not isInside("docs2/a.txt", "docs")
        assert not isInside("other", "docs")


class TestFilters:
    """Test listing filters, dood!"""

    def testGlobFilterMatchesNames(self):
        """Test glob filter matches on entry name"""
        entries = [makeEntry("x.txt"), makeEntry("y.txt"), makeEntry("z.java")]
        result = applyFilter(entries, globFilter("*.txt"))
        assert [entry.name for entry in result] == ["x.txt", "y.txt"]

    def testGlobFilterIsCaseSensitive(self):
        """Test glob filter does not fold case"""
        assert not globFilter("*.txt")(makeEntry("README.TXT"))

    def testApplyFilterWithoutFilterReturnsAll(self):
        """Test that a missing filter passes everything through"""
        entries = [makeEntry("a"), makeEntry("b", isDirectory=True)]
        assert applyFilter(entries, None) == entries

    def testApplyFilterWithPredicate(self):
        """Test arbitrary predicate filters"""
        entries = [makeEntry("a"), makeEntry("b", isDirectory=True)]
        result = applyFilter(entries, lambda entry: entry.isDirectory)
        assert [entry.name for entry in result] == ["b"]
