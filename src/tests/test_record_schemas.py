"""
Test suite for RecordSchemas decode dispatch
Following TDD approach with AAA pattern and descriptive naming
"""

import pytest
from lever_adapter.config_loader import ConfigurationError
from lever_adapter.endpoint_registry import ENDPOINTS
from lever_adapter.http_client import DecodeError
from lever_adapter.record_schemas import (
    RecordDecoderRegistry, RECORD_TYPES, Candidate, Interview, Feedback, Resume,
    Archived, Posting, Stage, list_decoder
)


class TestRecordDecoderRegistry:
    """Test suite for entity type dispatch"""

    def test_registry_covers_every_registered_endpoint_type(self):
        """
        Test that each endpoint's entity type has a decoder
        """
        # Arrange
        registry = RecordDecoderRegistry()

        # Act & Assert
        for descriptor in ENDPOINTS.values():
            assert callable(registry.get_decoder(descriptor.entity_type))

    def test_get_decoder_with_unknown_type_raises_configuration_error(self):
        """
        Test that an unknown tag is a configuration error, not a decode error
        """
        # Arrange
        registry = RecordDecoderRegistry()

        # Act & Assert
        with pytest.raises(ConfigurationError) as exc_info:
            registry.get_decoder('offers')

        assert "Unknown endpoint type: offers" in str(exc_info.value)

    def test_decode_with_custom_table_uses_given_decoders(self):
        """
        Test that a registry can be built from an explicit table
        """
        # Arrange
        registry = RecordDecoderRegistry({'stages': list_decoder(Stage)})

        # Act
        records = registry.decode('stages', [{'id': 's1', 'text': 'New lead'}])

        # Assert
        assert records == [Stage(id='s1', text='New lead')]
        with pytest.raises(ConfigurationError):
            registry.get_decoder('users')

    def test_decode_preserves_server_order(self):
        """
        Test that records come back in payload order
        """
        # Arrange
        registry = RecordDecoderRegistry()
        payload = [{'id': 'c'}, {'id': 'a'}, {'id': 'b'}]

        # Act
        records = registry.decode('stages', payload)

        # Assert
        assert [record.id for record in records] == ['c', 'a', 'b']

    @pytest.mark.parametrize('payload', [None, {'id': 'u1'}, 'users'])
    def test_decode_with_non_list_payload_raises_decode_error(self, payload):
        """
        Test that payloads that are not JSON arrays are rejected
        """
        # Arrange
        registry = RecordDecoderRegistry()

        # Act & Assert
        with pytest.raises(DecodeError):
            registry.decode('users', payload)

    def test_decode_with_non_object_entry_raises_decode_error(self):
        """
        Test that array entries must be JSON objects
        """
        # Arrange
        registry = RecordDecoderRegistry()

        # Act & Assert
        with pytest.raises(DecodeError):
            registry.decode('postings', [{'id': 'p1'}, 'p2'])


class TestLeverRecord:
    """Test suite for record decoding and encoding"""

    def test_from_dict_with_nested_shapes_decodes_nested_records(self):
        """
        Test that nested objects and lists of objects become records
        """
        # Arrange
        data = {
            'id': 'cand_1',
            'name': 'Ada Lovelace',
            'emails': ['ada@example.com'],
            'stageChanges': [{'toStageId': 'stage_1', 'toStageIndex': 0, 'updatedAt': 1500000000000}],
            'archived': {'archivedAt': 1600000000000, 'archivedReason': 'reason_1'},
            'tags': ['engineering'],
        }

        # Act
        candidate = Candidate.from_dict(data)

        # Assert
        assert candidate.id == 'cand_1'
        assert candidate.emails == ['ada@example.com']
        assert candidate.stage_changes[0].to_stage_id == 'stage_1'
        assert candidate.archived == Archived(archived_at=1600000000000, reason='reason_1')
        assert candidate.location is None
        assert candidate.sources == []

    def test_from_dict_with_null_values_keeps_defaults(self):
        """
        Test that explicit nulls decode like missing keys
        """
        # Act
        posting = Posting.from_dict({'id': 'p1', 'categories': None, 'tags': None})

        # Assert
        assert posting.categories is None
        assert posting.tags == []

    def test_from_dict_with_non_list_for_list_field_raises_decode_error(self):
        """
        Test that list fields must hold JSON arrays
        """
        # Act & Assert
        with pytest.raises(DecodeError):
            Interview.from_dict({'id': 'i1', 'interviewers': {'id': 'u1'}})

    def test_to_dict_uses_api_json_keys(self):
        """
        Test that records are encoded with camelCase keys, including nested records
        """
        # Arrange
        feedback = Feedback.from_dict({
            'id': 'f1',
            'baseTemplateId': 'tmpl_1',
            'fields': [{'type': 'score-system', 'text': 'Rating', 'value': 4, 'required': True}],
            'completedAt': 1500000000000,
        })

        # Act
        result = feedback.to_dict()

        # Assert
        assert result['baseTemplateId'] == 'tmpl_1'
        assert result['completedAt'] == 1500000000000
        assert result['fields'][0] == {
            'type': 'score-system', 'text': 'Rating', 'value': 4,
            'description': None, 'required': True
        }
        assert 'base_template_id' not in result

    def test_to_dict_keeps_opaque_parsed_resume_data(self):
        """
        Test that raw parsed resume sections pass through unchanged
        """
        # Arrange
        positions = [{'org': 'Analytical Engines Ltd', 'title': 'Engineer'}]
        resume = Resume.from_dict({
            'id': 'r1',
            'file': {'downloadUrl': 'https://example.com/r1', 'ext': '.pdf', 'name': 'cv.pdf'},
            'parsedData': {'positions': positions}
        })

        # Act
        result = resume.to_dict()

        # Assert
        assert result['file']['downloadUrl'] == 'https://example.com/r1'
        assert result['parsedData']['positions'] == positions
        assert result['parsedData']['schools'] is None

    def test_record_types_table_maps_tags_to_record_classes(self):
        """
        Test that the type table contains the expected record classes
        """
        # Assert
        assert RECORD_TYPES['candidates'] is Candidate
        assert RECORD_TYPES['interviews'] is Interview
        assert len(RECORD_TYPES) == 10
