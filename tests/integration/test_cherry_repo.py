"""End-to-end runs against real git repositories."""

from __future__ import annotations

import pytest

from gitcherry.classifier import run_cherry
from gitcherry.cli import main
from gitcherry.errors import ResolutionError
from gitcherry.git.repository import GitRepository
from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def diverged(repo_builder: RepoBuilder) -> dict[str, str]:
    """main gets F1 and F3 cherry-picked after an unrelated commit; topic keeps F1..F3."""
    oids: dict[str, str] = {}
    oids["base"] = repo_builder.commit("initial", {"README": "hello\n"})
    repo_builder.git("checkout", "-q", "-b", "topic")
    oids["f1"] = repo_builder.commit("add foo", {"foo.txt": "foo\n"})
    oids["f2"] = repo_builder.commit("add bar", {"bar.txt": "bar\n"})
    oids["f3"] = repo_builder.commit("add baz", {"baz.txt": "baz\n"})
    repo_builder.git("checkout", "-q", "main")
    repo_builder.commit("unrelated", {"other.txt": "other\n"})
    repo_builder.git("cherry-pick", oids["f1"])
    repo_builder.git("cherry-pick", oids["f3"])
    repo_builder.git("checkout", "-q", "topic")
    return oids


def test_cherry_picked_commits_are_marked_upstream(
    repo_builder: RepoBuilder, diverged: dict[str, str]
) -> None:
    repository = GitRepository(repo_builder.path())

    result = run_cherry(repository, "main", "topic")

    assert [(item.sign, item.commit.oid) for item in result] == [
        ("-", diverged["f1"]),
        ("+", diverged["f2"]),
        ("-", diverged["f3"]),
    ]


def test_cli_output_matches_git_cherry(
    repo_builder: RepoBuilder, diverged: dict[str, str], capsys: pytest.CaptureFixture[str]
) -> None:
    expected = repo_builder.git("cherry", "-v", "main", "topic")

    main(["-C", str(repo_builder.path()), "-v", "main", "topic"])

    assert capsys.readouterr().out.strip() == expected


def test_cli_abbreviates_ids(
    repo_builder: RepoBuilder, diverged: dict[str, str], capsys: pytest.CaptureFixture[str]
) -> None:
    main(["-C", str(repo_builder.path()), "--abbrev=10", "main"])

    lines = capsys.readouterr().out.splitlines()
    assert lines == [
        f"- {diverged['f1'][:10]}",
        f"+ {diverged['f2'][:10]}",
        f"- {diverged['f3'][:10]}",
    ]


def test_config_at_work_tree_root_applies_from_a_subdirectory(
    repo_builder: RepoBuilder, diverged: dict[str, str], capsys: pytest.CaptureFixture[str]
) -> None:
    (repo_builder.path() / ".gitcherry.yml").write_text("abbrev: 12\n", encoding="utf-8")
    nested = repo_builder.path() / "docs" / "notes"
    nested.mkdir(parents=True)

    main(["-C", str(nested), "main"])

    assert capsys.readouterr().out.splitlines() == [
        f"- {diverged['f1'][:12]}",
        f"+ {diverged['f2'][:12]}",
        f"- {diverged['f3'][:12]}",
    ]


def test_tracked_upstream_is_used_when_omitted(
    repo_builder: RepoBuilder, diverged: dict[str, str], capsys: pytest.CaptureFixture[str]
) -> None:
    repo_builder.git("branch", "--set-upstream-to=main", "topic")

    main(["-C", str(repo_builder.path())])

    assert capsys.readouterr().out.splitlines() == [
        f"- {diverged['f1']}",
        f"+ {diverged['f2']}",
        f"- {diverged['f3']}",
    ]


def test_missing_tracked_upstream_exits_with_usage(
    repo_builder: RepoBuilder, diverged: dict[str, str], capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["-C", str(repo_builder.path())])

    assert excinfo.value.code == 129
    assert capsys.readouterr().out == ""


def test_limit_cuts_off_older_commits(repo_builder: RepoBuilder, diverged: dict[str, str]) -> None:
    repository = GitRepository(repo_builder.path())

    result = run_cherry(repository, "main", "topic", diverged["f1"])

    assert [item.commit.oid for item in result] == [diverged["f2"], diverged["f3"]]


def test_same_branch_yields_nothing(repo_builder: RepoBuilder, diverged: dict[str, str]) -> None:
    repository = GitRepository(repo_builder.path())

    assert run_cherry(repository, "topic", "HEAD") == []


def test_unknown_upstream_is_named(repo_builder: RepoBuilder, diverged: dict[str, str]) -> None:
    repository = GitRepository(repo_builder.path())

    with pytest.raises(ResolutionError, match="doesnotexist"):
        run_cherry(repository, "doesnotexist")


def test_change_applied_at_a_different_offset_is_equivalent(repo_builder: RepoBuilder) -> None:
    body = "".join(f"line {n}\n" for n in range(1, 11))
    repo_builder.commit("initial", {"lines.txt": body})
    repo_builder.git("checkout", "-q", "-b", "topic")
    fix = repo_builder.commit("fix line 8", {"lines.txt": body.replace("line 8\n", "line eight\n")})
    repo_builder.git("checkout", "-q", "main")
    repo_builder.commit("prepend header", {"lines.txt": "header a\nheader b\nheader c\n" + body})
    repo_builder.git("cherry-pick", fix)

    result = run_cherry(GitRepository(repo_builder.path()), "main", "topic")

    assert [(item.sign, item.commit.oid) for item in result] == [("-", fix)]


@pytest.mark.parametrize("separator", ["\f", "\r"])
def test_changes_differing_after_a_control_character_are_not_equivalent(
    repo_builder: RepoBuilder, separator: str
) -> None:
    source = repo_builder.path() / "a.c"
    source.write_bytes(b"int main;\n")
    repo_builder.commit("initial")
    repo_builder.git("checkout", "-q", "-b", "topic")
    source.write_bytes(f"int main;\nint x;{separator}int safe = 1;\n".encode("ascii"))
    topic = repo_builder.commit("harmless")
    repo_builder.git("checkout", "-q", "main")
    source.write_bytes(f"int main;\nint x;{separator}int evil = 666;\n".encode("ascii"))
    repo_builder.commit("other")

    result = run_cherry(GitRepository(repo_builder.path()), "main", "topic")

    assert [(item.sign, item.commit.oid) for item in result] == [("+", topic)]
    assert repo_builder.git("cherry", "main", "topic") == f"+ {topic}"


def test_commits_behind_a_merge_are_still_reported(repo_builder: RepoBuilder) -> None:
    repo_builder.commit("initial", {"README": "hello\n"})
    repo_builder.git("checkout", "-q", "-b", "side")
    side = repo_builder.commit("side work", {"side.txt": "side\n"})
    repo_builder.git("checkout", "-q", "main")
    repo_builder.git("checkout", "-q", "-b", "topic")
    own = repo_builder.commit("topic work", {"topic.txt": "topic\n"})
    repo_builder.git("merge", "-q", "--no-ff", "--no-edit", "side")
    repo_builder.git("checkout", "-q", "main")
    upstream = repo_builder.commit("upstream work", {"up.txt": "up\n"})

    result = run_cherry(GitRepository(repo_builder.path()), upstream, "topic")

    reported = [item.commit.oid for item in result]
    assert sorted(reported) == sorted([side, own])
    assert all(item.sign == "+" for item in result)
