from devgod.errors import ExternalToolError
from devgod.reviewers import ReviewerResolver, resolve_reviewers, sanitize_reviewers

from conftest import FakeForge, FakePrompter


def test_sanitize_reviewers():
    assert sanitize_reviewers([" @alice ", "", "bob", "@", "alice", "acme/core"]) == [
        "alice",
        "bob",
        "acme/core",
    ]


def test_resolve_prefers_selection():
    assert resolve_reviewers(["alice", "bob"], ["carol"], ["@bob"]) == ["bob"]


def test_resolve_falls_back_on_empty_selection():
    assert resolve_reviewers(["alice"], ["@carol"], []) == ["carol"]


def test_resolve_falls_back_without_candidates():
    assert resolve_reviewers([], ["carol"], ["alice"]) == ["carol"]


def test_resolver_includes_teams():
    forge = FakeForge()
    forge.list_teams = lambda: ["acme/core"]
    prompter = FakePrompter(reviewers=["acme/core"])

    assert ReviewerResolver(forge, prompter).resolve([]) == ["acme/core"]


def test_resolver_survives_forge_failure():
    forge = FakeForge()

    def boom():
        raise ExternalToolError("HTTP 403")

    forge.list_collaborators = boom
    prompter = FakePrompter(reviewers=["alice"])

    assert ReviewerResolver(forge, prompter).resolve(["dave"]) == ["dave"]
    assert prompter.questions == []
