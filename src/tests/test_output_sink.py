"""
Test suite for JsonLinesSink component
Following TDD approach with AAA pattern and descriptive naming
"""

import io
import json
import sys
from lever_adapter.output_sink import JsonLinesSink
from lever_adapter.record_schemas import Stage, User


class TestJsonLinesSink:
    """Test suite for line-delimited JSON output"""

    def test_emit_writes_one_json_object_per_line(self):
        """
        Test that each record becomes exactly one line
        """
        # Arrange
        stream = io.StringIO()
        sink = JsonLinesSink(stream)

        # Act
        sink.emit(Stage(id='s1', text='New lead'))
        sink.emit(Stage(id='s2', text='Phone screen'))

        # Assert
        lines = stream.getvalue().splitlines()
        assert [json.loads(line) for line in lines] == [
            {'id': 's1', 'text': 'New lead'},
            {'id': 's2', 'text': 'Phone screen'}
        ]
        assert sink.records_written == 2

    def test_emit_keeps_non_ascii_text_unescaped(self):
        """
        Test that names are written as UTF-8 text rather than escapes
        """
        # Arrange
        stream = io.StringIO()
        sink = JsonLinesSink(stream)

        # Act
        sink.emit(User(id='u1', name='Zoë Müller'))

        # Assert
        assert 'Zoë Müller' in stream.getvalue()
        assert stream.getvalue().endswith("\n")

    def test_open_without_path_writes_to_stdout(self):
        """
        Test that the default sink is standard output and is not closed
        """
        # Act
        sink = JsonLinesSink.open()

        # Assert
        assert sink.stream is sys.stdout
        assert sink.close_stream is False

    def test_open_with_path_appends_to_existing_file(self, tmp_path):
        """
        Test that file output appends so resumed runs extend earlier output
        """
        # Arrange
        output_path = tmp_path / 'out' / 'stages.jsonl'
        output_path.parent.mkdir()
        output_path.write_text('{"id": "s0", "text": "Earlier"}\n')

        # Act
        sink = JsonLinesSink.open(output_path)
        sink.emit(Stage(id='s1', text='New lead'))
        sink.close()

        # Assert
        lines = output_path.read_text().splitlines()
        assert len(lines) == 2
        assert json.loads(lines[1])['id'] == 's1'
        assert sink.stream.closed

    def test_open_with_path_in_missing_directory_creates_it(self, tmp_path):
        """
        Test that parent directories of the output file are created
        """
        # Arrange
        output_path = tmp_path / 'exports' / 'lever' / 'stages.jsonl'

        # Act
        sink = JsonLinesSink.open(output_path)
        sink.close()

        # Assert
        assert output_path.exists()
