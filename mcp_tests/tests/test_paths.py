import pytest

from core.paths import (
    compile_glob,
    expand_braces,
    file_uri,
    glob_to_regex,
    split_posix,
    to_repo_relative_path,
)


def test_split_posix():
    assert split_posix("/a//b/") == ("a", "b")
    assert split_posix("") == ()


@pytest.mark.parametrize(
    "path,expected",
    [
        ("src/app.py", "src/app.py"),
        ("/src/app.py", "src/app.py"),
        ("/PROJ/repo/src/app.py", "src/app.py"),
        ("file:///PROJ/repo/src/app.py", "src/app.py"),
        ("file://src/app.py", "src/app.py"),
        ("/OTHER/repo/src/app.py", "OTHER/repo/src/app.py"),
    ],
)
def test_to_repo_relative_path(path, expected):
    assert to_repo_relative_path(path, project="PROJ", repository="repo") == expected


def test_file_uri():
    assert file_uri("PROJ", "repo", "src/app.py") == "file:///PROJ/repo/src/app.py"
    assert file_uri("PROJ", "repo", "docs/read me.md") == "file:///PROJ/repo/docs/read%20me.md"


def test_expand_braces():
    assert expand_braces("**/*.{js,ts}") == ["**/*.js", "**/*.ts"]
    assert expand_braces("{a,b{c,d}}.txt") == ["a.txt", "bc.txt", "bd.txt"]
    assert expand_braces("plain.txt") == ["plain.txt"]
    assert expand_braces("{single}.txt") == ["{single}.txt"]
    assert expand_braces("{open.txt") == ["{open.txt"]


def test_glob_double_star_crosses_directories():
    assert compile_glob("**/*.ts")("src/a/b.ts")
    assert compile_glob("**/*.ts")("a.ts")
    assert not compile_glob("**/*.ts")("src/a/b.tsx")


def test_glob_single_star_stays_in_segment():
    assert compile_glob("*.json")("package.json")
    assert not compile_glob("*.json")("nested/package.json")


def test_glob_brackets_and_braces():
    assert compile_glob("src/[a-z]*/*.ts")("src/utils/a.ts")
    assert not compile_glob("src/[a-z]*/*.ts")("src/Utils/a.ts")
    assert compile_glob("**/*.{js,ts}")("lib/x.js")
    assert not compile_glob("**/*.{js,ts}")("lib/x.py")


def test_glob_prefix_directory():
    match = compile_glob("src/**/*.test.js")
    assert match("src/a.test.js")
    assert match("src/deep/er/a.test.js")
    assert not match("test/a.test.js")


def test_glob_empty_pattern_matches_everything():
    assert compile_glob("")("any/where/file.txt")


def test_glob_skips_hidden_entries_unless_named():
    assert not compile_glob("**/*.ts")(".github/a.ts")
    assert not compile_glob("**/*.ts")("src/.hidden.ts")
    assert not compile_glob("*.json")(".eslintrc.json")
    assert not compile_glob("?env")(".env")
    assert not compile_glob("")(".git/config")
    assert compile_glob(".github/**/*.yml")(".github/workflows/ci.yml")
    assert compile_glob(".*.json")(".eslintrc.json")
    assert compile_glob("**/.env")("deploy/.env")


@pytest.mark.parametrize(
    "pattern,path,expected",
    [
        ("**/*.go", "main.go", True),
        ("**/*.go", "sub/dir.go", True),
        ("**/*.go", "util.py", False),
        ("*.go", "main.go", True),
        ("*.go", "sub/dir.go", False),
        ("src/**/*.ts", "src/a/b.ts", True),
        ("src/**", "src/a/b.ts", True),
        ("*.json", "packageXjson", False),
        ("a+b.txt", "a+b.txt", True),
        ("src/[a-z]*.go", "src/main.go", True),
        ("src/[a-z]*.go", "src/Main.go", False),
        ("[!_]*.py", "app.py", True),
        ("[!_]*.py", "_private.py", False),
        ("a[.go", "a[.go", True),
    ],
)
def test_glob_to_regex(pattern, path, expected):
    assert bool(glob_to_regex(pattern).match(path)) is expected
