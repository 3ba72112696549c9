"""Shared GitHub entity shapes embedded in webhook payloads.

Only the fields octogate and typical handlers rely on are modelled; unknown
fields are ignored on decode so that GitHub can add fields without breaking
parsing. Entities whose structure varies widely between events are exposed
as :data:`JSONObject` mappings instead.
"""

from __future__ import annotations

import typing as typ

import msgspec

JSONObject = dict[str, typ.Any]


class Entity(msgspec.Struct, kw_only=True, omit_defaults=True):
    """Base for embedded GitHub entities."""


class User(Entity):
    """A GitHub account: user, bot or organization owner."""

    login: str
    id: int
    node_id: str | None = None
    type: str | None = None
    html_url: str | None = None
    avatar_url: str | None = None
    site_admin: bool = False


class Organization(Entity):
    """A GitHub organization."""

    login: str
    id: int
    node_id: str | None = None
    url: str | None = None
    description: str | None = None


class Repository(Entity):
    """A repository as embedded in webhook payloads."""

    id: int
    name: str
    full_name: str
    node_id: str | None = None
    private: bool = False
    owner: User | None = None
    html_url: str | None = None
    description: str | None = None
    fork: bool = False
    default_branch: str | None = None
    visibility: str | None = None
    archived: bool = False

    @property
    def owner_login(self) -> str:
        """Return the owner part of ``full_name``."""
        return self.full_name.partition("/")[0]


class InstallationRef(Entity):
    """The installation stub attached to installation-scoped deliveries.

    ``id`` is kept loose so that a missing or malformed id never prevents the
    payload from decoding; :attr:`EventEnvelope.installation_id` carries the
    validated value.
    """

    id: int | str | None = None
    node_id: str | None = None


class Installation(Entity):
    """A full App installation, as sent with ``installation`` events."""

    id: int
    account: User
    app_id: int
    target_type: str
    node_id: str | None = None
    app_slug: str | None = None
    target_id: int | None = None
    repository_selection: str | None = None
    html_url: str | None = None
    permissions: dict[str, str] = msgspec.field(default_factory=dict)
    events: list[str] = msgspec.field(default_factory=list)
    suspended_at: str | None = None


class InstallationRepository(Entity):
    """A repository listed in installation change payloads."""

    id: int
    name: str
    full_name: str
    node_id: str | None = None
    private: bool = False


class Label(Entity):
    """An issue or pull request label."""

    id: int
    name: str
    node_id: str | None = None
    color: str | None = None
    description: str | None = None
    default: bool = False


class Milestone(Entity):
    """A repository milestone."""

    id: int
    number: int
    title: str
    state: str | None = None
    description: str | None = None
    due_on: str | None = None


class Issue(Entity):
    """An issue (or the issue half of a pull request)."""

    id: int
    number: int
    title: str
    state: str | None = None
    user: User | None = None
    body: str | None = None
    labels: list[Label] = msgspec.field(default_factory=list)
    milestone: Milestone | None = None
    html_url: str | None = None
    pull_request: JSONObject | None = None

    @property
    def is_pull_request(self) -> bool:
        """Return whether this issue is backed by a pull request."""
        return self.pull_request is not None


class IssueComment(Entity):
    """A comment on an issue or pull request conversation."""

    id: int
    body: str
    user: User | None = None
    html_url: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class CommitComment(Entity):
    """A comment on a commit."""

    id: int
    body: str
    commit_id: str
    path: str | None = None
    position: int | None = None
    line: int | None = None
    user: User | None = None
    html_url: str | None = None


class ReviewComment(Entity):
    """A pull request review comment attached to a diff."""

    id: int
    body: str
    commit_id: str
    path: str
    diff_hunk: str
    pull_request_review_id: int | None = None
    in_reply_to_id: int | None = None
    user: User | None = None
    html_url: str | None = None


class Review(Entity):
    """A pull request review."""

    id: int
    state: str
    body: str | None = None
    user: User | None = None
    commit_id: str | None = None
    submitted_at: str | None = None
    html_url: str | None = None


class BranchRef(Entity):
    """The ``head`` or ``base`` side of a pull request."""

    ref: str
    sha: str
    label: str | None = None
    user: User | None = None
    repo: Repository | None = None


class PullRequest(Entity):
    """A pull request."""

    id: int
    number: int
    state: str
    title: str
    head: BranchRef
    base: BranchRef
    user: User | None = None
    body: str | None = None
    draft: bool = False
    merged: bool | None = None
    merge_commit_sha: str | None = None
    labels: list[Label] = msgspec.field(default_factory=list)
    html_url: str | None = None


class CommitAuthor(Entity):
    """Git author or committer identity."""

    name: str
    email: str | None = None
    username: str | None = None


class PushCommit(Entity):
    """A commit listed in a push payload."""

    id: str
    message: str
    timestamp: str | None = None
    url: str | None = None
    distinct: bool = True
    author: CommitAuthor | None = None
    committer: CommitAuthor | None = None
    added: list[str] = msgspec.field(default_factory=list)
    removed: list[str] = msgspec.field(default_factory=list)
    modified: list[str] = msgspec.field(default_factory=list)


class Team(Entity):
    """An organization team."""

    id: int
    name: str
    slug: str | None = None
    node_id: str | None = None
    description: str | None = None
    privacy: str | None = None
    permission: str | None = None


class Release(Entity):
    """A repository release."""

    id: int
    tag_name: str
    name: str | None = None
    draft: bool = False
    prerelease: bool = False
    body: str | None = None
    author: User | None = None
    html_url: str | None = None


class CheckRun(Entity):
    """A check run."""

    id: int
    name: str
    head_sha: str
    status: str
    conclusion: str | None = None
    html_url: str | None = None
    check_suite: JSONObject | None = None


class CheckSuite(Entity):
    """A check suite."""

    id: int
    head_sha: str
    status: str | None = None
    conclusion: str | None = None
    head_branch: str | None = None
    app: JSONObject | None = None


class Deployment(Entity):
    """A deployment."""

    id: int
    sha: str
    ref: str
    environment: str
    task: str | None = None
    description: str | None = None
    creator: User | None = None


class DeploymentStatus(Entity):
    """A deployment status update."""

    id: int
    state: str
    environment: str | None = None
    description: str | None = None
    target_url: str | None = None
    creator: User | None = None


class WorkflowJob(Entity):
    """A GitHub Actions workflow job."""

    id: int
    run_id: int
    name: str
    status: str
    head_sha: str | None = None
    conclusion: str | None = None
    labels: list[str] = msgspec.field(default_factory=list)
    runner_name: str | None = None


class WorkflowRun(Entity):
    """A GitHub Actions workflow run."""

    id: int
    name: str | None
    head_sha: str
    status: str | None = None
    conclusion: str | None = None
    head_branch: str | None = None
    event: str | None = None
    run_number: int | None = None
    workflow_id: int | None = None
    html_url: str | None = None


class Hook(Entity):
    """A webhook configuration."""

    id: int
    type: str
    active: bool = True
    name: str | None = None
    events: list[str] = msgspec.field(default_factory=list)
    config: JSONObject = msgspec.field(default_factory=dict)


class CodeScanningAlert(Entity):
    """A code scanning alert."""

    number: int
    rule: JSONObject
    tool: JSONObject
    state: str | None = None
    html_url: str | None = None


class SecretScanningAlert(Entity):
    """A secret scanning alert."""

    number: int
    secret_type: str
    state: str | None = None
    resolution: str | None = None
    html_url: str | None = None


class DependabotAlert(Entity):
    """A Dependabot alert."""

    number: int
    dependency: JSONObject
    security_advisory: JSONObject
    state: str | None = None
    security_vulnerability: JSONObject | None = None
    html_url: str | None = None


class RepositoryVulnerabilityAlert(Entity):
    """A legacy repository vulnerability alert."""

    id: int
    affected_package_name: str
    affected_range: str | None = None
    external_identifier: str | None = None
    fixed_in: str | None = None


class WikiPage(Entity):
    """A wiki page touched by a Gollum event."""

    page_name: str
    title: str
    action: str
    sha: str | None = None
    html_url: str | None = None


__all__ = [
    "BranchRef",
    "CheckRun",
    "CheckSuite",
    "CodeScanningAlert",
    "CommitAuthor",
    "CommitComment",
    "DependabotAlert",
    "Deployment",
    "DeploymentStatus",
    "Entity",
    "Hook",
    "Installation",
    "InstallationRef",
    "InstallationRepository",
    "Issue",
    "IssueComment",
    "JSONObject",
    "Label",
    "Milestone",
    "Organization",
    "PullRequest",
    "PushCommit",
    "Release",
    "Repository",
    "RepositoryVulnerabilityAlert",
    "Review",
    "ReviewComment",
    "SecretScanningAlert",
    "Team",
    "User",
    "WikiPage",
    "WorkflowJob",
    "WorkflowRun",
]
