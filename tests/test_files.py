from security_scanner.config import DEFAULT_EXCLUDE, DEFAULT_INCLUDE
from security_scanner.utils import GlobMatcher, expand_braces, find_files

TREE = {
    "app.jsx": "",
    "README.md": "",
    "src/a.js": "",
    "src/b.ts": "",
    "src/c.py": "",
    "src/deep/d.tsx": "",
    "node_modules/pkg/index.js": "",
    "dist/bundle.js": "",
    "packages/web/build/out.js": "",
}


def test_expand_braces_handles_alternatives_and_nesting():
    assert expand_braces("**/*.{js,ts}") == ["**/*.js", "**/*.ts"]
    assert expand_braces("{src,lib}/*.{a,b}") == ["src/*.a", "src/*.b", "lib/*.a", "lib/*.b"]
    assert expand_braces("plain/*.js") == ["plain/*.js"]


def test_glob_matcher_segments():
    matcher = GlobMatcher(["*.js"])
    assert matcher.matches("a.js")
    assert not matcher.matches("src/a.js")

    recursive = GlobMatcher(["**/*.js"])
    assert recursive.matches("a.js")
    assert recursive.matches("src/deep/a.js")

    excluded = GlobMatcher(["**/node_modules/**"])
    assert excluded.matches("node_modules/pkg/index.js")
    assert excluded.matches("web/node_modules/pkg/index.js")
    assert excluded.matches_directory("web/node_modules")
    assert not excluded.matches("src/node_modules_helper.js")


def test_default_patterns_select_sources_and_skip_dependencies(make_tree):
    root = make_tree(TREE)

    files = find_files(root, DEFAULT_INCLUDE, DEFAULT_EXCLUDE)

    assert files == ["app.jsx", "src/a.js", "src/b.ts", "src/deep/d.tsx"]


def test_files_matching_several_includes_are_listed_once(make_tree):
    root = make_tree(TREE)

    files = find_files(root, ["**/*.js", "src/**"], ["**/node_modules/**", "**/dist/**", "**/build/**"])

    assert files == ["src/a.js", "src/b.ts", "src/c.py", "src/deep/d.tsx"]
    assert len(files) == len(set(files))


def test_exclude_takes_precedence_over_include(make_tree):
    root = make_tree(TREE)

    files = find_files(root, ["src/**/*.js", "src/*.js"], ["src/a.js"])

    assert "src/a.js" not in files


def test_wildcards_skip_hidden_paths_unless_named(make_tree):
    root = make_tree(
        {
            "src/app.js": "",
            "src/.cache/tmp.js": "",
            ".next/static/chunk.js": "",
            ".git/hooks/pre-commit.js": "",
            ".eslintrc.js": "",
            ".github/scripts/release.js": "",
        }
    )

    assert find_files(root, DEFAULT_INCLUDE, DEFAULT_EXCLUDE) == ["src/app.js"]
    assert find_files(root, ["src/**"], DEFAULT_EXCLUDE) == ["src/app.js"]
    assert find_files(root, [".github/**/*.js", ".eslintrc.js"], DEFAULT_EXCLUDE) == [
        ".github/scripts/release.js",
        ".eslintrc.js",
    ]
