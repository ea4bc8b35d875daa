import httpx
import pytest

from archive_fetcher.domain.entities import Input
from archive_fetcher.domain.exceptions import (
    AccessDeniedError,
    MissingAttributeError,
    RateLimitError,
    RepositoryNotFoundError,
    ResolutionError,
    TransportError,
)
from archive_fetcher.domain.value_objects import Revision
from archive_fetcher.infrastructure.github_adapter import GitHubAdapter
from archive_fetcher.infrastructure.gitlab_adapter import GitLabAdapter

from conftest import REV_A, ForgeStub

GITHUB_COMMITS = "https://api.github.com/repos/NixOS/nixpkgs/commits/nixos-23.05"
GITLAB_COMMITS = "https://gitlab.com/api/v4/projects/group%2Fproject/repository/commits?ref_name=main"


def github_input(**extra: object) -> Input:
    return Input.from_mapping({"type": "github", "owner": "NixOS", "repo": "nixpkgs", **extra})


def gitlab_input(**extra: object) -> Input:
    return Input.from_mapping({"type": "gitlab", "owner": "group", "repo": "project", **extra})


def test_access_headers_per_provider(client: httpx.Client) -> None:
    assert GitHubAdapter(client).access_header_from_token("t0k") == ("Authorization", "token t0k")
    assert GitLabAdapter(client).access_header_from_token("t0k") == ("Authorization", "Bearer t0k")


def test_github_resolves_ref_from_sha_field(forge: ForgeStub, client: httpx.Client) -> None:
    forge.json(GITHUB_COMMITS, {"sha": REV_A, "commit": {}})

    rev = GitHubAdapter(client).get_rev_from_ref(github_input(ref="nixos-23.05"))

    assert rev == Revision.parse(REV_A)
    assert forge.urls() == [GITHUB_COMMITS]
    assert "authorization" not in forge.requests[0].headers


def test_github_sends_token_when_configured(forge: ForgeStub, client: httpx.Client) -> None:
    forge.json(GITHUB_COMMITS, {"sha": REV_A})

    GitHubAdapter(client, token="secret").get_rev_from_ref(github_input(ref="nixos-23.05"))

    assert forge.requests[0].headers["authorization"] == "token secret"


def test_empty_token_means_unauthenticated(forge: ForgeStub, client: httpx.Client) -> None:
    forge.json(GITHUB_COMMITS, {"sha": REV_A})

    adapter = GitHubAdapter(client, token="")
    adapter.get_rev_from_ref(github_input(ref="nixos-23.05"))

    assert "authorization" not in forge.requests[0].headers
    assert adapter.get_download_url(github_input(rev=REV_A)).access_token_header is None


def test_github_uses_api_subdomain_of_custom_host(forge: ForgeStub, client: httpx.Client) -> None:
    url = "https://api.ghe.example.com/repos/NixOS/nixpkgs/commits/main"
    forge.json(url, {"sha": REV_A})

    GitHubAdapter(client).get_rev_from_ref(github_input(ref="main", host="ghe.example.com"))

    assert forge.urls() == [url]


def test_gitlab_resolves_ref_from_first_commit_id(forge: ForgeStub, client: httpx.Client) -> None:
    forge.json(GITLAB_COMMITS, [{"id": REV_A}, {"id": "f" * 40}])

    rev = GitLabAdapter(client, token="glpat").get_rev_from_ref(gitlab_input(ref="main"))

    assert rev == Revision.parse(REV_A)
    assert forge.requests[0].headers["authorization"] == "Bearer glpat"


def test_gitlab_resolution_honours_host(forge: ForgeStub, client: httpx.Client) -> None:
    url = "https://git.example.org/api/v4/projects/group%2Fproject/repository/commits?ref_name=main"
    forge.json(url, [{"id": REV_A}])

    rev = GitLabAdapter(client).get_rev_from_ref(gitlab_input(ref="main", host="git.example.org"))

    assert rev == Revision.parse(REV_A)


@pytest.mark.parametrize(
    "payload",
    [{}, {"sha": None}, {"sha": "not-a-hash"}, [REV_A], "text"],
)
def test_github_bad_payload_is_resolution_error(
    forge: ForgeStub, client: httpx.Client, payload: object
) -> None:
    forge.json(GITHUB_COMMITS, payload)

    with pytest.raises(ResolutionError):
        GitHubAdapter(client).get_rev_from_ref(github_input(ref="nixos-23.05"))


@pytest.mark.parametrize("payload", [[], {"id": REV_A}, [{"sha": REV_A}], [{"id": "short"}]])
def test_gitlab_bad_payload_is_resolution_error(
    forge: ForgeStub, client: httpx.Client, payload: object
) -> None:
    forge.json(GITLAB_COMMITS, payload)

    with pytest.raises(ResolutionError):
        GitLabAdapter(client).get_rev_from_ref(gitlab_input(ref="main"))


def test_unparsable_body_is_resolution_error(forge: ForgeStub, client: httpx.Client) -> None:
    forge.respond(GITHUB_COMMITS, httpx.Response(200, content=b"<html>"))

    with pytest.raises(ResolutionError, match="not valid JSON"):
        GitHubAdapter(client).get_rev_from_ref(github_input(ref="nixos-23.05"))


def test_resolution_requires_ref(client: httpx.Client) -> None:
    with pytest.raises(MissingAttributeError):
        GitHubAdapter(client).get_rev_from_ref(github_input())


@pytest.mark.parametrize(
    ("response", "error"),
    [
        (httpx.Response(404), RepositoryNotFoundError),
        (httpx.Response(401), AccessDeniedError),
        (httpx.Response(403), AccessDeniedError),
        (
            httpx.Response(
                403,
                headers={"x-ratelimit-remaining": "0", "x-ratelimit-reset": "1700000000"},
            ),
            RateLimitError,
        ),
        (httpx.Response(429), RateLimitError),
        (httpx.Response(500), TransportError),
    ],
)
def test_http_status_translation(
    forge: ForgeStub, client: httpx.Client, response: httpx.Response, error: type[Exception]
) -> None:
    forge.respond(GITHUB_COMMITS, response)

    with pytest.raises(error):
        GitHubAdapter(client).get_rev_from_ref(github_input(ref="nixos-23.05"))


def test_rate_limit_message_mentions_reset_time(forge: ForgeStub, client: httpx.Client) -> None:
    forge.respond(
        GITHUB_COMMITS,
        httpx.Response(403, headers={"x-ratelimit-remaining": "0", "x-ratelimit-reset": "0"}),
    )

    with pytest.raises(RateLimitError, match="1970-01-01 00:00:00 UTC"):
        GitHubAdapter(client).get_rev_from_ref(github_input(ref="nixos-23.05"))


def test_download_urls_target_the_revision(client: httpx.Client) -> None:
    github = GitHubAdapter(client, token="gh").get_download_url(github_input(rev=REV_A))
    gitlab = GitLabAdapter(client).get_download_url(gitlab_input(rev=REV_A, host="git.example.org"))

    assert github.url == f"https://api.github.com/repos/NixOS/nixpkgs/tarball/{REV_A}"
    assert github.access_token_header == ("Authorization", "token gh")
    assert gitlab.url == (
        "https://git.example.org/api/v4/projects/group%2Fproject"
        f"/repository/archive.tar.gz?sha={REV_A}"
    )
    assert gitlab.access_token_header is None


def test_download_url_requires_resolved_rev(client: httpx.Client) -> None:
    with pytest.raises(MissingAttributeError, match="rev"):
        GitHubAdapter(client).get_download_url(github_input(ref="main"))


def test_clone_addresses(client: httpx.Client) -> None:
    assert (
        GitHubAdapter(client).build_clone_address(github_input())
        == "ssh://git@github.com/NixOS/nixpkgs.git"
    )
    assert (
        GitLabAdapter(client).build_clone_address(gitlab_input(host="git.example.org"))
        == "ssh://git@git.example.org/group/project.git"
    )
