"""Tests for path normalization, tree walking, and glob matching."""

from pathlib import Path

from styleaudit.paths import (
    compile_glob,
    find_repo_root,
    matches_any,
    normalize_path,
    relative_to_root,
    split_csv,
    walk_files,
)


class TestNormalizePath:
    def test_backslashes_and_dot_prefix(self):
        assert normalize_path(".\\components\\Button.tsx") == "components/Button.tsx"

    def test_duplicate_and_trailing_separators(self):
        assert normalize_path("./styles//tokens/") == "styles/tokens"

    def test_relative_to_root(self, tmp_path: Path):
        target = tmp_path / "app" / "page.tsx"
        assert relative_to_root(target, tmp_path) == "app/page.tsx"


class TestGlobs:
    def test_double_star_crosses_directories(self):
        assert matches_any("components/Button/Button.module.css", ["components/**"])

    def test_double_star_prefix_matches_top_level(self):
        assert matches_any("Button.test.tsx", ["**/*.test.tsx"])
        assert matches_any("app/ui/Button.test.tsx", ["**/*.test.tsx"])

    def test_single_star_stays_in_segment(self):
        assert compile_glob("app/*.css").match("app/globals.css")
        assert compile_glob("app/*.css").match("app/nested/page.css") is None

    def test_no_match(self):
        assert not matches_any("styles/globals.css", ["components/**", "app/**"])


class TestWalkFiles:
    def test_sorted_and_pruned(self, tmp_path: Path):
        for rel in ["styles/b.css", "styles/a.css", "node_modules/pkg/x.css", ".next/static/c.css"]:
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("")
        assert list(walk_files(tmp_path)) == ["styles/a.css", "styles/b.css"]


class TestSplitCsv:
    def test_flattens_repeated_and_comma_values(self):
        assert split_csv(["a,b", " c ", ""]) == ["a", "b", "c"]

    def test_none(self):
        assert split_csv(None) == []


class TestFindRepoRoot:
    def test_git_repo(self, tmp_git_repo: Path):
        nested = tmp_git_repo / "src" / "deep"
        nested.mkdir(parents=True)
        assert find_repo_root(nested).resolve() == tmp_git_repo.resolve()

    def test_package_json_fallback(self, tmp_path: Path):
        project = tmp_path / "web"
        (project / "src").mkdir(parents=True)
        (project / "package.json").write_text("{}")
        assert find_repo_root(project / "src") == project.resolve()
