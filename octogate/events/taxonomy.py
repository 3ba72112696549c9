"""The closed set of webhook events and their canonical trial order.

Webhook bodies carry no discriminant, so an untyped document is decoded by
trying each shape in :data:`EVENT_TYPES` and keeping the first that fits.
The order is part of the public contract and follows three rules:

1. shapes that contain another shape's required fields come first
   (``pull_request_review_comment`` before ``pull_request``,
   ``issue_comment`` before ``issues``, ``deployment_status`` before
   ``deployment``, ``membership`` before ``member`` and ``team``);
2. shapes identified by a single distinctive object follow, grouped by
   domain;
3. broad shapes distinguished only by literal ``action`` values
   (``repository``, ``organization``, ``github_app_authorization``) and
   ``public`` come last.

New shapes are appended within their group; existing positions never move.
When the ``X-GitHub-Event`` header is available the trial is skipped and
the named shape is decoded directly (see :func:`payload_type_for`).
"""

from __future__ import annotations

import types
import typing as typ

from .payloads import (
    BranchProtectionRuleEvent,
    CheckRunEvent,
    CheckSuiteEvent,
    CodeScanningAlertEvent,
    CommitCommentEvent,
    CreateEvent,
    DeleteEvent,
    DependabotAlertEvent,
    DeployKeyEvent,
    DeploymentEvent,
    DeploymentProtectionRuleEvent,
    DeploymentStatusEvent,
    DiscussionCommentEvent,
    DiscussionEvent,
    ForkEvent,
    GithubAppAuthorizationEvent,
    GollumEvent,
    InstallationEvent,
    InstallationRepositoriesEvent,
    InstallationTargetEvent,
    IssueCommentEvent,
    IssuesEvent,
    LabelEvent,
    MarketplacePurchaseEvent,
    MemberEvent,
    MembershipEvent,
    MergeGroupEvent,
    MetaEvent,
    MilestoneEvent,
    OrganizationEvent,
    OrgBlockEvent,
    PackageEvent,
    PageBuildEvent,
    PersonalAccessTokenRequestEvent,
    PingEvent,
    ProjectCardEvent,
    ProjectColumnEvent,
    ProjectsV2Event,
    ProjectsV2ItemEvent,
    PublicEvent,
    PullRequestEvent,
    PullRequestReviewCommentEvent,
    PullRequestReviewEvent,
    PullRequestReviewThreadEvent,
    PushEvent,
    RegistryPackageEvent,
    ReleaseEvent,
    RepositoryAdvisoryEvent,
    RepositoryEvent,
    RepositoryImportEvent,
    RepositoryVulnerabilityAlertEvent,
    SecretScanningAlertEvent,
    SecretScanningAlertLocationEvent,
    SecurityAdvisoryEvent,
    SecurityAndAnalysisEvent,
    SponsorshipEvent,
    StarEvent,
    StatusEvent,
    TeamAddEvent,
    TeamEvent,
    WatchEvent,
    WebhookPayload,
    WorkflowDispatchEvent,
    WorkflowJobEvent,
    WorkflowRunEvent,
)

Event = typ.Union[  # noqa: UP007 - the declaration order is the trial order
    # Containing shapes
    PullRequestReviewCommentEvent,
    PullRequestReviewThreadEvent,
    PullRequestReviewEvent,
    PullRequestEvent,
    IssueCommentEvent,
    IssuesEvent,
    CommitCommentEvent,
    DiscussionCommentEvent,
    DiscussionEvent,
    CheckRunEvent,
    CheckSuiteEvent,
    CodeScanningAlertEvent,
    SecretScanningAlertLocationEvent,
    SecretScanningAlertEvent,
    DependabotAlertEvent,
    RepositoryVulnerabilityAlertEvent,
    DeploymentProtectionRuleEvent,
    DeploymentStatusEvent,
    DeploymentEvent,
    WorkflowJobEvent,
    WorkflowRunEvent,
    WorkflowDispatchEvent,
    PushEvent,
    CreateEvent,
    DeleteEvent,
    InstallationRepositoriesEvent,
    InstallationTargetEvent,
    InstallationEvent,
    MembershipEvent,
    MemberEvent,
    OrgBlockEvent,
    TeamEvent,
    TeamAddEvent,
    # Distinctive single-object shapes
    MarketplacePurchaseEvent,
    SponsorshipEvent,
    MergeGroupEvent,
    MetaEvent,
    PingEvent,
    MilestoneEvent,
    LabelEvent,
    PackageEvent,
    RegistryPackageEvent,
    PageBuildEvent,
    PersonalAccessTokenRequestEvent,
    ProjectCardEvent,
    ProjectColumnEvent,
    ProjectsV2ItemEvent,
    ProjectsV2Event,
    ReleaseEvent,
    RepositoryAdvisoryEvent,
    SecurityAdvisoryEvent,
    RepositoryImportEvent,
    StatusEvent,
    StarEvent,
    WatchEvent,
    ForkEvent,
    GollumEvent,
    BranchProtectionRuleEvent,
    DeployKeyEvent,
    SecurityAndAnalysisEvent,
    # Broad shapes
    RepositoryEvent,
    OrganizationEvent,
    GithubAppAuthorizationEvent,
    PublicEvent,
]
"""Union of every known webhook payload, in canonical trial order."""

EVENT_TYPES: tuple[type[WebhookPayload], ...] = typ.get_args(Event)

_BY_NAME: dict[str, type[WebhookPayload]] = {
    payload_type.event_name: payload_type for payload_type in EVENT_TYPES
}


def payload_type_for(event_name: str) -> type[WebhookPayload] | None:
    """Return the payload shape for an ``X-GitHub-Event`` name, if known."""
    return _BY_NAME.get(event_name.strip().lower())


def event_name_for(payload_type: type[WebhookPayload]) -> str:
    """Return the GitHub event name for a payload shape."""
    return payload_type.event_name


def event_names() -> list[str]:
    """Return every known event name in canonical trial order."""
    return [payload_type.event_name for payload_type in EVENT_TYPES]


def candidate_types(target: object) -> tuple[type[WebhookPayload], ...]:
    """Return the payload shapes a decode target admits, in trial order.

    ``target`` may be a single payload class, the :data:`Event` union or any
    sub-union of payload classes. Members of a sub-union are tried in
    canonical order, not in the order the caller wrote them.

    Raises
    ------
    TypeError
        If ``target`` is not a payload class or a union of them.

    """
    if isinstance(target, type) and issubclass(target, WebhookPayload):
        return (target,)

    origin = typ.get_origin(target)
    if origin is typ.Union or origin is types.UnionType:
        members = typ.get_args(target)
        unknown = [
            member
            for member in members
            if not (isinstance(member, type) and issubclass(member, WebhookPayload))
        ]
        if unknown:
            msg = f"Unsupported payload types in union: {unknown!r}"
            raise TypeError(msg)
        ordered = tuple(member for member in EVENT_TYPES if member in members)
        extras = tuple(member for member in members if member not in EVENT_TYPES)
        return ordered + extras

    msg = f"Unsupported payload type: {target!r}"
    raise TypeError(msg)


__all__ = [
    "EVENT_TYPES",
    "Event",
    "candidate_types",
    "event_name_for",
    "event_names",
    "payload_type_for",
]
