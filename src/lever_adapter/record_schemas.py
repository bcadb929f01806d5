"""
RecordSchemas module mapping Lever entity types to typed record decoders

Every Lever list endpoint returns its entities under the envelope's data field.
Each entity type tag has a record dataclass; fields carry their JSON key in the
field metadata so records decode from, and encode back to, the API's camelCase
shape.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, List, Optional, Type

from lever_adapter.config_loader import ConfigurationError
from lever_adapter.http_client import DecodeError


def json_field(key: str, nested: Optional[type] = None, many: bool = False) -> Any:
    """Declare a record field read from, and written to, the given JSON key"""
    metadata = {'json': key, 'nested': nested, 'many': many}
    if many:
        return field(default_factory=list, metadata=metadata)
    return field(default=None, metadata=metadata)


class LeverRecord:
    """Base class for decoded Lever entities"""

    @classmethod
    def from_dict(cls, data: Any) -> 'LeverRecord':
        """
        Decode one JSON object into a record

        Missing or null keys keep the field default.

        Raises:
            DecodeError: If the value or a nested value has the wrong JSON type
        """
        if not isinstance(data, dict):
            raise DecodeError(f"Expected a JSON object for {cls.__name__}, got {type(data).__name__}")

        values = {}
        for record_field in fields(cls):
            key = record_field.metadata.get('json', record_field.name)
            if data.get(key) is None:
                continue

            value = data[key]
            nested = record_field.metadata.get('nested')
            if record_field.metadata.get('many'):
                if not isinstance(value, list):
                    raise DecodeError(
                        f"Expected a list for {cls.__name__}.{key}, got {type(value).__name__}"
                    )
                if nested:
                    value = [nested.from_dict(item) for item in value]
            elif nested:
                value = nested.from_dict(value)

            values[record_field.name] = value

        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Encode the record with the API's JSON keys"""
        result = {}
        for record_field in fields(self):
            key = record_field.metadata.get('json', record_field.name)
            value = getattr(self, record_field.name)
            if isinstance(value, LeverRecord):
                value = value.to_dict()
            elif isinstance(value, list):
                value = [item.to_dict() if isinstance(item, LeverRecord) else item for item in value]
            result[key] = value
        return result


@dataclass
class Archived(LeverRecord):
    archived_at: Optional[int] = json_field('archivedAt')
    reason: Optional[str] = json_field('archivedReason')


@dataclass
class StageChange(LeverRecord):
    to_stage_id: Optional[str] = json_field('toStageId')
    to_stage_index: Optional[int] = json_field('toStageIndex')
    updated_at: Optional[int] = json_field('updatedAt')


@dataclass
class Category(LeverRecord):
    location: Optional[str] = json_field('location')
    commitment: Optional[str] = json_field('commitment')
    team: Optional[str] = json_field('team')
    level: Optional[str] = json_field('level')


@dataclass
class FormField(LeverRecord):
    type: Optional[str] = json_field('type')
    text: Optional[str] = json_field('text')
    value: Any = json_field('value')
    description: Optional[str] = json_field('description')
    required: Optional[bool] = json_field('required')


@dataclass
class ResumeFile(LeverRecord):
    download_url: Optional[str] = json_field('downloadUrl')
    ext: Optional[str] = json_field('ext')
    name: Optional[str] = json_field('name')
    uploaded_at: Optional[int] = json_field('uploadedAt')


@dataclass
class ParsedData(LeverRecord):
    # Left as raw JSON, the parser output varies by resume
    positions: Any = json_field('positions')
    schools: Any = json_field('schools')


@dataclass
class User(LeverRecord):
    """
    Users include any team member invited to join in on recruiting efforts,
    from Super Admin down to Interviewer
    """
    id: Optional[str] = json_field('id')
    name: Optional[str] = json_field('name')
    username: Optional[str] = json_field('username')
    email: Optional[str] = json_field('email')
    created_at: Optional[int] = json_field('createdAt')
    access_role: Optional[str] = json_field('accessRole')


@dataclass
class Candidate(LeverRecord):
    id: Optional[str] = json_field('id')
    name: Optional[str] = json_field('name')
    location: Optional[str] = json_field('location')
    emails: List[str] = json_field('emails', many=True)
    origin: Optional[str] = json_field('origin')
    sources: List[str] = json_field('sources', many=True)
    stage: Optional[str] = json_field('stage')
    stage_changes: List[StageChange] = json_field('stageChanges', nested=StageChange, many=True)
    created_at: Optional[int] = json_field('createdAt')
    archived_at: Optional[int] = json_field('archivedAt')
    last_advanced_at: Optional[int] = json_field('lastAdvancedAt')
    archived: Optional[Archived] = json_field('archived', nested=Archived)
    tags: List[str] = json_field('tags', many=True)


@dataclass
class Posting(LeverRecord):
    id: Optional[str] = json_field('id')
    text: Optional[str] = json_field('text')
    created_at: Optional[int] = json_field('createdAt')
    updated_at: Optional[int] = json_field('updatedAt')
    user: Optional[str] = json_field('user')
    owner: Optional[str] = json_field('owner')
    categories: Optional[Category] = json_field('categories', nested=Category)
    tags: List[str] = json_field('tags', many=True)
    state: Optional[str] = json_field('state')
    req_code: Optional[str] = json_field('reqCode')


@dataclass
class Stage(LeverRecord):
    id: Optional[str] = json_field('id')
    text: Optional[str] = json_field('text')


@dataclass
class ArchiveReason(LeverRecord):
    id: Optional[str] = json_field('id')
    text: Optional[str] = json_field('text')


@dataclass
class Interview(LeverRecord):
    id: Optional[str] = json_field('id')
    subject: Optional[str] = json_field('subject')
    note: Optional[str] = json_field('note')
    interviewers: List[User] = json_field('interviewers', nested=User, many=True)
    timezone: Optional[str] = json_field('timezone')
    date: Optional[int] = json_field('date')
    duration: Optional[int] = json_field('duration')
    location: Optional[str] = json_field('location')
    feedback_template: Optional[str] = json_field('feedbackTemplate')
    feedback_forms: List[str] = json_field('feedbackForms', many=True)
    user: Optional[str] = json_field('user')
    stage: Optional[str] = json_field('stage')
    canceled_at: Optional[int] = json_field('canceledAt')


@dataclass
class Application(LeverRecord):
    id: Optional[str] = json_field('id')
    created_at: Optional[int] = json_field('createdAt')
    type: Optional[str] = json_field('type')
    posting: Optional[str] = json_field('posting')
    posting_owner: Optional[str] = json_field('postingOwner')
    posting_hiring_manager: Optional[str] = json_field('postingHiringManager')
    user: Optional[str] = json_field('user')
    name: Optional[str] = json_field('name')
    email: Optional[str] = json_field('email')
    company: Optional[str] = json_field('company')
    tags: List[str] = json_field('tags', many=True)
    archived: Optional[Archived] = json_field('archived', nested=Archived)


@dataclass
class Feedback(LeverRecord):
    id: Optional[str] = json_field('id')
    type: Optional[str] = json_field('type')
    text: Optional[str] = json_field('text')
    instructions: Optional[str] = json_field('instructions')
    fields: List[FormField] = json_field('fields', nested=FormField, many=True)
    base_template_id: Optional[str] = json_field('baseTemplateId')
    interview: Optional[str] = json_field('interview')
    user: Optional[str] = json_field('user')
    created_at: Optional[int] = json_field('createdAt')
    completed_at: Optional[int] = json_field('completedAt')


@dataclass
class Referral(LeverRecord):
    id: Optional[str] = json_field('id')
    type: Optional[str] = json_field('type')
    text: Optional[str] = json_field('text')
    instructions: Optional[str] = json_field('instructions')
    referrer: Optional[str] = json_field('referrer')


@dataclass
class Resume(LeverRecord):
    id: Optional[str] = json_field('id')
    created_at: Optional[int] = json_field('createdAt')
    file: Optional[ResumeFile] = json_field('file', nested=ResumeFile)
    parsed_data: Optional[ParsedData] = json_field('parsedData', nested=ParsedData)


RecordDecoder = Callable[[Any], List[LeverRecord]]


def list_decoder(record_class: Type[LeverRecord]) -> RecordDecoder:
    """Build a decoder turning a JSON array payload into records of one class"""

    def decode(payload: Any) -> List[LeverRecord]:
        if not isinstance(payload, list):
            raise DecodeError(
                f"Expected a list of {record_class.__name__} entries, got {type(payload).__name__}"
            )
        return [record_class.from_dict(item) for item in payload]

    return decode


class RecordDecoderRegistry:
    """Dispatch table from entity type tag to payload decoder"""

    def __init__(self, decoders: Optional[Dict[str, RecordDecoder]] = None):
        self.decoders = dict(decoders) if decoders is not None else default_decoders()

    def get_decoder(self, entity_type: str) -> RecordDecoder:
        """
        Look up the decoder for an entity type

        Raises:
            ConfigurationError: If no decoder is registered for the tag
        """
        try:
            return self.decoders[entity_type]
        except KeyError:
            raise ConfigurationError(f"Unknown endpoint type: {entity_type}") from None

    def decode(self, entity_type: str, payload: Any) -> List[LeverRecord]:
        """Decode a page payload into records, preserving server order"""
        return self.get_decoder(entity_type)(payload)


RECORD_TYPES: Dict[str, Type[LeverRecord]] = {
    'users': User,
    'candidates': Candidate,
    'archivedReasons': ArchiveReason,
    'postings': Posting,
    'stages': Stage,
    'interviews': Interview,
    'referrals': Referral,
    'feedback': Feedback,
    'resumes': Resume,
    'applications': Application,
}


def default_decoders() -> Dict[str, RecordDecoder]:
    return {entity_type: list_decoder(record_class) for entity_type, record_class in RECORD_TYPES.items()}
