"""Scope resolution: expand a scope selector into ScanTargets.

    resolve_targets(client, config) -> list[ScanTarget]

Targets follow the API response order; nothing is sorted.
"""

from advsec_report.client import AdoClient, AdoClientError
from advsec_report.config import Config, Scope
from advsec_report.models import ScanTarget
from advsec_report.reports import echo_exception, echo_failure, vecho

API_VERSION = "7.1"
PROJECT_PAGE_SIZE = 10_000


class ScanAbortedError(Exception):
    """Raised when no scan target can be derived at all."""


def resolve_targets(client: AdoClient, config: Config) -> list[ScanTarget]:
    if config.scope is Scope.REPOSITORY:
        return [ScanTarget(client.base_url, config.project, config.repository)]

    if config.scope is Scope.PROJECT:
        projects = [config.project]
    else:
        projects = list_projects(client)

    targets: list[ScanTarget] = []
    for project in projects:
        targets.extend(list_repositories(client, project))
    return targets


def list_projects(client: AdoClient) -> list[str]:
    """Return all project names in the organization.

    Raises:
        ScanAbortedError: the project listing did not succeed.
    """
    url = client.org_url("_apis", "projects")
    vecho(f"Listing projects: {url}")
    try:
        response = client.get(url, {"$top": PROJECT_PAGE_SIZE, "api-version": API_VERSION})
    except AdoClientError as exc:
        raise ScanAbortedError(f"Failed to list projects: {exc}") from exc

    if not response.ok:
        raise ScanAbortedError(
            f"Failed to list projects: {response.description} "
            f"(HTTP {response.status_code}) {response.url}"
        )
    return [p["name"] for p in response.value if p.get("name")]


def list_repositories(client: AdoClient, project: str) -> list[ScanTarget]:
    """Return one ScanTarget per repository in *project*, or [] on failure."""
    url = client.org_url(project, "_apis", "git", "repositories")
    vecho(f"Listing repositories of '{project}': {url}")
    try:
        response = client.get(url, {"api-version": API_VERSION})
    except AdoClientError as exc:
        echo_exception(f"Failed to list repositories of project '{project}'", exc)
        return []

    if not response.ok:
        echo_failure(f"Failed to list repositories of project '{project}'", response)
        return []

    return [
        ScanTarget(
            organization=client.base_url,
            project=project,
            repository=repo["name"],
            repository_url=repo.get("webUrl", ""),
        )
        for repo in response.value
        if repo.get("name")
    ]
