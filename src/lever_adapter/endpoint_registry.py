"""
EndpointRegistry module describing the remote collections that can be synchronised
"""

import string
from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from lever_adapter.config_loader import ConfigurationError


PARENT_KEY_SLOT = "parent_key"


class SyncMode(Enum):
    """Which orchestrator drives an endpoint"""
    DIRECT = "direct"
    LIST_DRIVEN = "list_driven"


@dataclass
class PageCursor:
    """Mutable pagination state for one cursor sequence"""
    offset: str = ""
    has_next: bool = True


@dataclass
class SyncTarget:
    """An endpoint bound to its query parameters, parent key and cursor"""
    descriptor: 'EndpointDescriptor'
    query_params: List[Tuple[str, str]] = field(default_factory=list)
    parent_key: Optional[str] = None
    cursor: PageCursor = field(default_factory=PageCursor)

    @property
    def entity_type(self) -> str:
        return self.descriptor.entity_type

    @property
    def method(self) -> str:
        return self.descriptor.method

    def resolved_path(self) -> str:
        """Path with the parent key substituted, if the template has a slot"""
        if self.descriptor.requires_parent_key:
            return self.descriptor.path_template.format(parent_key=self.parent_key)
        return self.descriptor.path_template

    def request_parameters(self) -> List[Tuple[str, str]]:
        """Static query parameters plus the continuation offset once one is known"""
        params = list(self.query_params)
        if self.cursor.offset:
            params.append(('offset', self.cursor.offset))
        return params


@dataclass(frozen=True)
class EndpointDescriptor:
    """Immutable description of one remote collection"""
    key: str
    name: str
    entity_type: str
    path_template: str
    mode: SyncMode
    method: str = "GET"
    description: str = ""

    def __post_init__(self):
        slots = [
            field_name for _, field_name, _, _ in string.Formatter().parse(self.path_template)
            if field_name is not None
        ]
        if len(slots) > 1 or any(slot != PARENT_KEY_SLOT for slot in slots):
            raise ConfigurationError(
                f"Endpoint {self.key} path template must have at most one "
                f"{{{PARENT_KEY_SLOT}}} slot: {self.path_template}"
            )
        if bool(slots) != (self.mode is SyncMode.LIST_DRIVEN):
            raise ConfigurationError(
                f"Endpoint {self.key} template {self.path_template} does not match mode {self.mode.value}"
            )

    @property
    def requires_parent_key(self) -> bool:
        return self.mode is SyncMode.LIST_DRIVEN

    def bind(self, query_params: Sequence[Tuple[str, str]] = (),
             parent_key: Optional[str] = None) -> SyncTarget:
        """
        Create a sync target with a fresh cursor

        Args:
            query_params: Static (field, value) pairs for every request
            parent_key: Parent identifier, required for list-driven endpoints

        Returns:
            SyncTarget whose cursor starts at the first page

        Raises:
            ConfigurationError: If a parent key is missing or not expected
        """
        if self.requires_parent_key and not parent_key:
            raise ConfigurationError(f"Endpoint {self.key} requires a parent key")
        if not self.requires_parent_key and parent_key is not None:
            raise ConfigurationError(f"Endpoint {self.key} does not take a parent key")

        return SyncTarget(
            descriptor=self,
            query_params=list(query_params),
            parent_key=parent_key,
            cursor=PageCursor()
        )


ENDPOINTS: Dict[str, EndpointDescriptor] = {
    descriptor.key: descriptor for descriptor in [
        EndpointDescriptor(
            key="downloadUsers",
            name="Download Users",
            entity_type="users",
            path_template="/users",
            mode=SyncMode.DIRECT,
            description="Download all users from lever."
        ),
        EndpointDescriptor(
            key="downloadCandidates",
            name="Download Candidates",
            entity_type="candidates",
            path_template="/candidates",
            mode=SyncMode.DIRECT,
            description="Download all candidates"
        ),
        EndpointDescriptor(
            key="downloadArchivedReasons",
            name="Download Archived Reasons",
            entity_type="archivedReasons",
            path_template="/archive_reasons",
            mode=SyncMode.DIRECT,
            description="Download archive reasons for a candidate"
        ),
        EndpointDescriptor(
            key="downloadPostings",
            name="Download Postings",
            entity_type="postings",
            path_template="/postings",
            mode=SyncMode.DIRECT,
            description="Download all job postings"
        ),
        EndpointDescriptor(
            key="downloadStages",
            name="Download Stages",
            entity_type="stages",
            path_template="/stages",
            mode=SyncMode.DIRECT,
            description="Download all the stages that exist in the pipeline"
        ),
        EndpointDescriptor(
            key="downloadInterviews",
            name="Download Interviews",
            entity_type="interviews",
            path_template="/candidates/{parent_key}/interviews",
            mode=SyncMode.LIST_DRIVEN,
            description="Download interviews for a candidates"
        ),
        EndpointDescriptor(
            key="downloadReferrals",
            name="Download Referrals",
            entity_type="referrals",
            path_template="/candidates/{parent_key}/referrals",
            mode=SyncMode.LIST_DRIVEN,
            description="Download the referrals for a candidate"
        ),
        EndpointDescriptor(
            key="downloadFeedback",
            name="Download Feedback",
            entity_type="feedback",
            path_template="/candidates/{parent_key}/feedback",
            mode=SyncMode.LIST_DRIVEN,
            description="Download feedback for a candidates"
        ),
        EndpointDescriptor(
            key="downloadResumes",
            name="Download Resumes",
            entity_type="resumes",
            path_template="/candidates/{parent_key}/resumes",
            mode=SyncMode.LIST_DRIVEN,
            description="Download resumes for each candidates specified"
        ),
        EndpointDescriptor(
            key="downloadApplications",
            name="Download Applications",
            entity_type="applications",
            path_template="/candidates/{parent_key}/applications",
            mode=SyncMode.LIST_DRIVEN,
            description="Download all job applications for a candidate"
        ),
    ]
}


def get_endpoint(key: str) -> EndpointDescriptor:
    """
    Look up a registered endpoint by name

    Raises:
        ConfigurationError: If the endpoint is not registered
    """
    try:
        return ENDPOINTS[key]
    except KeyError:
        raise ConfigurationError(
            f"Looks like the endpoint is not registered: {key!r} "
            f"(known endpoints: {', '.join(sorted(ENDPOINTS))})"
        ) from None
