"""Webhook payload shapes, one struct per GitHub event.

GitHub does not embed the event name in the JSON body, so each shape is
identified by its required fields. Shapes that would otherwise be
indistinguishable (for example ``watch`` and ``repository``) pin their
``action`` to the literal values GitHub documents for that event.

Every payload inherits the optional envelope fields GitHub attaches to most
deliveries: ``sender``, ``repository``, ``organization``, ``installation``
and ``enterprise``. The GitHub event name is available as the
``event_name`` class attribute.
"""

from __future__ import annotations

import typing as typ

import msgspec

from .common import (
    CheckRun,
    CheckSuite,
    CodeScanningAlert,
    CommitAuthor,
    CommitComment,
    DependabotAlert,
    Deployment,
    DeploymentStatus,
    Hook,
    Installation,
    InstallationRef,
    InstallationRepository,
    Issue,
    IssueComment,
    JSONObject,
    Label,
    Milestone,
    Organization,
    PullRequest,
    PushCommit,
    Release,
    Repository,
    RepositoryVulnerabilityAlert,
    Review,
    ReviewComment,
    SecretScanningAlert,
    Team,
    User,
    WikiPage,
    WorkflowJob,
    WorkflowRun,
)


class WebhookPayload(msgspec.Struct, kw_only=True, omit_defaults=True):
    """Base for every webhook payload shape."""

    event_name = ""

    sender: User | None = None
    repository: Repository | None = None
    organization: Organization | None = None
    installation: InstallationRef | None = None
    enterprise: JSONObject | None = None


# Pull requests


class PullRequestReviewCommentEvent(WebhookPayload):
    """Activity on a pull request review comment."""

    event_name = "pull_request_review_comment"

    action: str
    comment: ReviewComment
    pull_request: PullRequest
    changes: JSONObject | None = None


class PullRequestReviewThreadEvent(WebhookPayload):
    """A review thread was resolved or unresolved."""

    event_name = "pull_request_review_thread"

    action: str
    thread: JSONObject
    pull_request: PullRequest


class PullRequestReviewEvent(WebhookPayload):
    """A pull request review was submitted, edited or dismissed."""

    event_name = "pull_request_review"

    action: str
    review: Review
    pull_request: PullRequest
    changes: JSONObject | None = None


class PullRequestEvent(WebhookPayload):
    """Activity on a pull request."""

    event_name = "pull_request"

    action: str
    number: int
    pull_request: PullRequest
    label: Label | None = None
    assignee: User | None = None
    requested_reviewer: User | None = None
    requested_team: Team | None = None
    before: str | None = None
    after: str | None = None
    changes: JSONObject | None = None


# Issues and discussions


class IssueCommentEvent(WebhookPayload):
    """Activity on an issue or pull request comment."""

    event_name = "issue_comment"

    action: str
    issue: Issue
    comment: IssueComment
    changes: JSONObject | None = None


class IssuesEvent(WebhookPayload):
    """Activity on an issue."""

    event_name = "issues"

    action: str
    issue: Issue
    label: Label | None = None
    assignee: User | None = None
    milestone: Milestone | None = None
    changes: JSONObject | None = None


class CommitCommentEvent(WebhookPayload):
    """A commit comment was created."""

    event_name = "commit_comment"

    action: str
    comment: CommitComment


class DiscussionCommentEvent(WebhookPayload):
    """Activity on a discussion comment."""

    event_name = "discussion_comment"

    action: str
    comment: JSONObject
    discussion: JSONObject


class DiscussionEvent(WebhookPayload):
    """Activity on a discussion."""

    event_name = "discussion"

    action: str
    discussion: JSONObject
    label: Label | None = None
    answer: JSONObject | None = None
    changes: JSONObject | None = None


# Checks


class CheckRunEvent(WebhookPayload):
    """Activity on a check run."""

    event_name = "check_run"

    action: str
    check_run: CheckRun
    requested_action: JSONObject | None = None


class CheckSuiteEvent(WebhookPayload):
    """Activity on a check suite."""

    event_name = "check_suite"

    action: str
    check_suite: CheckSuite


# Security alerts


class CodeScanningAlertEvent(WebhookPayload):
    """Activity on a code scanning alert."""

    event_name = "code_scanning_alert"

    action: str
    alert: CodeScanningAlert
    ref: str
    commit_oid: str


class SecretScanningAlertLocationEvent(WebhookPayload):
    """A new location was found for a secret scanning alert."""

    event_name = "secret_scanning_alert_location"

    action: str
    alert: SecretScanningAlert
    location: JSONObject


class SecretScanningAlertEvent(WebhookPayload):
    """Activity on a secret scanning alert."""

    event_name = "secret_scanning_alert"

    action: str
    alert: SecretScanningAlert


class DependabotAlertEvent(WebhookPayload):
    """Activity on a Dependabot alert."""

    event_name = "dependabot_alert"

    action: str
    alert: DependabotAlert


class RepositoryVulnerabilityAlertEvent(WebhookPayload):
    """Activity on a legacy repository vulnerability alert."""

    event_name = "repository_vulnerability_alert"

    action: str
    alert: RepositoryVulnerabilityAlert


# Deployments and Actions


class DeploymentProtectionRuleEvent(WebhookPayload):
    """A deployment protection rule requests a decision."""

    event_name = "deployment_protection_rule"

    action: str
    environment: str
    event: str
    deployment_callback_url: str
    deployment: Deployment | None = None


class DeploymentStatusEvent(WebhookPayload):
    """A deployment status was created."""

    event_name = "deployment_status"

    action: str
    deployment_status: DeploymentStatus
    deployment: Deployment


class DeploymentEvent(WebhookPayload):
    """A deployment was created."""

    event_name = "deployment"

    action: str
    deployment: Deployment
    workflow: JSONObject | None = None
    workflow_run: JSONObject | None = None


class WorkflowJobEvent(WebhookPayload):
    """A workflow job was queued, started or completed."""

    event_name = "workflow_job"

    action: str
    workflow_job: WorkflowJob


class WorkflowRunEvent(WebhookPayload):
    """A workflow run was requested, started or completed."""

    event_name = "workflow_run"

    action: str
    workflow_run: WorkflowRun
    workflow: JSONObject


class WorkflowDispatchEvent(WebhookPayload):
    """A workflow was dispatched manually."""

    event_name = "workflow_dispatch"

    inputs: JSONObject | None
    ref: str
    workflow: str


# Git refs


class PushEvent(WebhookPayload):
    """Commits were pushed, or a tag was pushed."""

    event_name = "push"

    ref: str
    before: str
    after: str
    pusher: CommitAuthor
    commits: list[PushCommit] = msgspec.field(default_factory=list)
    head_commit: PushCommit | None = None
    base_ref: str | None = None
    compare: str | None = None
    created: bool = False
    deleted: bool = False
    forced: bool = False


class CreateEvent(WebhookPayload):
    """A branch or tag was created."""

    event_name = "create"

    ref: str
    ref_type: str
    master_branch: str
    pusher_type: str
    description: str | None = None


class DeleteEvent(WebhookPayload):
    """A branch or tag was deleted."""

    event_name = "delete"

    ref: str
    ref_type: str
    pusher_type: str


# Installations and Apps


class InstallationRepositoriesEvent(WebhookPayload):
    """Repositories were added to or removed from an installation."""

    event_name = "installation_repositories"

    action: str
    installation: Installation  # type: ignore[assignment]  # full installation
    repository_selection: str
    repositories_added: list[InstallationRepository]
    repositories_removed: list[InstallationRepository]
    requester: User | None = None


class InstallationTargetEvent(WebhookPayload):
    """The account an App is installed on was renamed."""

    event_name = "installation_target"

    action: str
    account: JSONObject
    target_type: str
    changes: JSONObject


class InstallationEvent(WebhookPayload):
    """An App installation was created, deleted, suspended or changed."""

    event_name = "installation"

    action: str
    installation: Installation  # type: ignore[assignment]  # full installation
    repositories: list[InstallationRepository] | None = None
    requester: User | None = None


# Organizations, teams and members


class MembershipEvent(WebhookPayload):
    """A user was added to or removed from a team."""

    event_name = "membership"

    action: str
    scope: str
    member: User
    team: Team


class MemberEvent(WebhookPayload):
    """A collaborator was added to, removed from or edited on a repository."""

    event_name = "member"

    action: str
    member: User
    changes: JSONObject | None = None


class OrgBlockEvent(WebhookPayload):
    """An organization blocked or unblocked a user."""

    event_name = "org_block"

    action: str
    blocked_user: User


class TeamEvent(WebhookPayload):
    """Activity on an organization team."""

    event_name = "team"

    action: str
    team: Team
    changes: JSONObject | None = None


class TeamAddEvent(WebhookPayload):
    """A repository was added to a team."""

    event_name = "team_add"

    team: Team
    repository: Repository  # type: ignore[assignment]  # always present


# Marketplace and sponsorship


class MarketplacePurchaseEvent(WebhookPayload):
    """Activity on a GitHub Marketplace purchase."""

    event_name = "marketplace_purchase"

    action: str
    effective_date: str
    marketplace_purchase: JSONObject
    previous_marketplace_purchase: JSONObject | None = None


class SponsorshipEvent(WebhookPayload):
    """Activity on a sponsorship listing."""

    event_name = "sponsorship"

    action: str
    sponsorship: JSONObject
    changes: JSONObject | None = None


class MergeGroupEvent(WebhookPayload):
    """Activity on a merge queue group."""

    event_name = "merge_group"

    action: str
    merge_group: JSONObject
    reason: str | None = None


# Webhook lifecycle


class MetaEvent(WebhookPayload):
    """The webhook itself was deleted."""

    event_name = "meta"

    action: typ.Literal["deleted"]
    hook_id: int
    hook: Hook


class PingEvent(WebhookPayload):
    """Sent when a new webhook is configured."""

    event_name = "ping"

    zen: str
    hook_id: int
    hook: Hook | None = None


# Repository content


class MilestoneEvent(WebhookPayload):
    """Activity on a milestone."""

    event_name = "milestone"

    action: str
    milestone: Milestone
    changes: JSONObject | None = None


class LabelEvent(WebhookPayload):
    """Activity on a repository label."""

    event_name = "label"

    action: str
    label: Label
    changes: JSONObject | None = None


class PackageEvent(WebhookPayload):
    """Activity on a GitHub Packages package."""

    event_name = "package"

    action: str
    package: JSONObject


class RegistryPackageEvent(WebhookPayload):
    """Activity on a registry package."""

    event_name = "registry_package"

    action: str
    registry_package: JSONObject


class PageBuildEvent(WebhookPayload):
    """A GitHub Pages build was attempted."""

    event_name = "page_build"

    id: int
    build: JSONObject


class PersonalAccessTokenRequestEvent(WebhookPayload):
    """Activity on a fine-grained personal access token request."""

    event_name = "personal_access_token_request"

    action: str
    personal_access_token_request: JSONObject


class ProjectCardEvent(WebhookPayload):
    """Activity on a classic project card."""

    event_name = "project_card"

    action: str
    project_card: JSONObject
    changes: JSONObject | None = None


class ProjectColumnEvent(WebhookPayload):
    """Activity on a classic project column."""

    event_name = "project_column"

    action: str
    project_column: JSONObject
    changes: JSONObject | None = None


class ProjectsV2ItemEvent(WebhookPayload):
    """Activity on an item in an organization project."""

    event_name = "projects_v2_item"

    action: str
    projects_v2_item: JSONObject
    changes: JSONObject | None = None


class ProjectsV2Event(WebhookPayload):
    """Activity on an organization project."""

    event_name = "projects_v2"

    action: str
    projects_v2: JSONObject
    changes: JSONObject | None = None


class ReleaseEvent(WebhookPayload):
    """Activity on a release."""

    event_name = "release"

    action: str
    release: Release
    changes: JSONObject | None = None


class RepositoryAdvisoryEvent(WebhookPayload):
    """A repository security advisory was published or reported."""

    event_name = "repository_advisory"

    action: str
    repository_advisory: JSONObject


class SecurityAdvisoryEvent(WebhookPayload):
    """A global security advisory was published, updated or withdrawn."""

    event_name = "security_advisory"

    action: str
    security_advisory: JSONObject


class RepositoryImportEvent(WebhookPayload):
    """A repository import finished."""

    event_name = "repository_import"

    status: typ.Literal["success", "cancelled", "failure"]
    repository: Repository  # type: ignore[assignment]  # always present


class StatusEvent(WebhookPayload):
    """The status of a commit changed."""

    event_name = "status"

    id: int
    sha: str
    state: str
    context: str
    name: str | None = None
    description: str | None = None
    target_url: str | None = None
    commit: JSONObject | None = None
    branches: list[JSONObject] = msgspec.field(default_factory=list)


class StarEvent(WebhookPayload):
    """A repository was starred or unstarred."""

    event_name = "star"

    action: typ.Literal["created", "deleted"]
    starred_at: str | None
    repository: Repository  # type: ignore[assignment]  # always present


class WatchEvent(WebhookPayload):
    """Someone started watching (starring) a repository."""

    event_name = "watch"

    action: typ.Literal["started"]
    repository: Repository  # type: ignore[assignment]  # always present


class ForkEvent(WebhookPayload):
    """A repository was forked."""

    event_name = "fork"

    forkee: Repository
    repository: Repository  # type: ignore[assignment]  # always present


class GollumEvent(WebhookPayload):
    """Wiki pages were created or updated."""

    event_name = "gollum"

    pages: list[WikiPage]
    repository: Repository  # type: ignore[assignment]  # always present


class BranchProtectionRuleEvent(WebhookPayload):
    """Activity on a branch protection rule."""

    event_name = "branch_protection_rule"

    action: str
    rule: JSONObject
    changes: JSONObject | None = None


class DeployKeyEvent(WebhookPayload):
    """A deploy key was created or deleted."""

    event_name = "deploy_key"

    action: str
    key: JSONObject


class SecurityAndAnalysisFrom(msgspec.Struct, kw_only=True, omit_defaults=True):
    """Previous security and analysis settings."""

    security_and_analysis: JSONObject | None = None


class SecurityAndAnalysisChanges(msgspec.Struct, kw_only=True, omit_defaults=True):
    """The ``changes`` object of a security and analysis event."""

    from_: SecurityAndAnalysisFrom = msgspec.field(name="from")


class SecurityAndAnalysisEvent(WebhookPayload):
    """Code security features were enabled or disabled for a repository."""

    event_name = "security_and_analysis"

    changes: SecurityAndAnalysisChanges
    repository: Repository  # type: ignore[assignment]  # always present


# Catch-all shapes: these match broadly and are tried last.


RepositoryAction = typ.Literal[
    "archived",
    "created",
    "deleted",
    "edited",
    "privatized",
    "publicized",
    "renamed",
    "transferred",
    "unarchived",
]


class RepositoryEvent(WebhookPayload):
    """A repository was created, deleted, renamed or otherwise changed."""

    event_name = "repository"

    action: RepositoryAction
    repository: Repository  # type: ignore[assignment]  # always present
    changes: JSONObject | None = None


OrganizationAction = typ.Literal[
    "deleted",
    "member_added",
    "member_invited",
    "member_removed",
    "renamed",
]


class OrganizationEvent(WebhookPayload):
    """Activity on an organization and its members."""

    event_name = "organization"

    action: OrganizationAction
    organization: Organization  # type: ignore[assignment]  # always present
    membership: JSONObject | None = None
    invitation: JSONObject | None = None
    user: User | None = None
    changes: JSONObject | None = None


class GithubAppAuthorizationEvent(WebhookPayload):
    """A user revoked their authorization of the App."""

    event_name = "github_app_authorization"

    action: typ.Literal["revoked"]
    sender: User  # type: ignore[assignment]  # always present


class PublicEvent(WebhookPayload):
    """A private repository was made public.

    The payload carries no ``action``, so any document with a repository
    that fits no earlier shape decodes as this event.
    """

    event_name = "public"

    repository: Repository  # type: ignore[assignment]  # always present
    action: None = None


__all__ = [
    "BranchProtectionRuleEvent",
    "CheckRunEvent",
    "CheckSuiteEvent",
    "CodeScanningAlertEvent",
    "CommitCommentEvent",
    "CreateEvent",
    "DeleteEvent",
    "DependabotAlertEvent",
    "DeployKeyEvent",
    "DeploymentEvent",
    "DeploymentProtectionRuleEvent",
    "DeploymentStatusEvent",
    "DiscussionCommentEvent",
    "DiscussionEvent",
    "ForkEvent",
    "GithubAppAuthorizationEvent",
    "GollumEvent",
    "InstallationEvent",
    "InstallationRepositoriesEvent",
    "InstallationTargetEvent",
    "IssueCommentEvent",
    "IssuesEvent",
    "LabelEvent",
    "MarketplacePurchaseEvent",
    "MemberEvent",
    "MembershipEvent",
    "MergeGroupEvent",
    "MetaEvent",
    "MilestoneEvent",
    "OrgBlockEvent",
    "OrganizationEvent",
    "PackageEvent",
    "PageBuildEvent",
    "PersonalAccessTokenRequestEvent",
    "PingEvent",
    "ProjectCardEvent",
    "ProjectColumnEvent",
    "ProjectsV2Event",
    "ProjectsV2ItemEvent",
    "PublicEvent",
    "PullRequestEvent",
    "PullRequestReviewCommentEvent",
    "PullRequestReviewEvent",
    "PullRequestReviewThreadEvent",
    "PushEvent",
    "RegistryPackageEvent",
    "ReleaseEvent",
    "RepositoryAdvisoryEvent",
    "RepositoryEvent",
    "RepositoryImportEvent",
    "RepositoryVulnerabilityAlertEvent",
    "SecretScanningAlertEvent",
    "SecretScanningAlertLocationEvent",
    "SecurityAdvisoryEvent",
    "SecurityAndAnalysisEvent",
    "SponsorshipEvent",
    "StarEvent",
    "StatusEvent",
    "TeamAddEvent",
    "TeamEvent",
    "WatchEvent",
    "WebhookPayload",
    "WorkflowDispatchEvent",
    "WorkflowJobEvent",
    "WorkflowRunEvent",
]
