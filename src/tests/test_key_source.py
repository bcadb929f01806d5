"""
Test suite for KeySource component
Following TDD approach with AAA pattern and descriptive naming
"""

import pytest
from lever_adapter.config_loader import ConfigurationError
from lever_adapter.key_source import load_parent_keys


class TestLoadParentKeys:
    """Test suite for reading parent keys from CSV files"""

    def test_load_parent_keys_with_single_column_returns_keys_in_order(self, tmp_path):
        """
        Test that keys are returned in file order
        """
        # Arrange
        file_path = tmp_path / 'candidates.csv'
        file_path.write_text("cand_3\ncand_1\ncand_2\n")

        # Act
        keys = load_parent_keys(file_path)

        # Assert
        assert keys == ['cand_3', 'cand_1', 'cand_2']

    def test_load_parent_keys_with_extra_columns_uses_first_field(self, tmp_path):
        """
        Test that only the first column is used as the key
        """
        # Arrange
        file_path = tmp_path / 'candidates.csv'
        file_path.write_text('cand_1,Ada Lovelace\n" cand_2 ","Grace, Hopper"\n')

        # Act
        keys = load_parent_keys(file_path)

        # Assert
        assert keys == ['cand_1', 'cand_2']

    def test_load_parent_keys_with_blank_lines_skips_them(self, tmp_path):
        """
        Test that blank lines do not produce keys
        """
        # Arrange
        file_path = tmp_path / 'candidates.csv'
        file_path.write_text("cand_1\n\ncand_2\n\n")

        # Act
        keys = load_parent_keys(file_path)

        # Assert
        assert keys == ['cand_1', 'cand_2']

    def test_load_parent_keys_with_missing_file_raises_configuration_error(self, tmp_path):
        """
        Test that a missing key file is a configuration error
        """
        # Act & Assert
        with pytest.raises(ConfigurationError) as exc_info:
            load_parent_keys(tmp_path / 'missing.csv')

        assert "Key source file not found" in str(exc_info.value)

    def test_load_parent_keys_with_empty_file_raises_configuration_error(self, tmp_path):
        """
        Test that a file without keys is rejected
        """
        # Arrange
        file_path = tmp_path / 'candidates.csv'
        file_path.write_text("")

        # Act & Assert
        with pytest.raises(ConfigurationError) as exc_info:
            load_parent_keys(file_path)

        assert "Key source file is empty" in str(exc_info.value)

    def test_load_parent_keys_with_empty_first_field_reports_line_number(self, tmp_path):
        """
        Test that a row with an empty key is rejected with its line number
        """
        # Arrange
        file_path = tmp_path / 'candidates.csv'
        file_path.write_text("cand_1\n,orphan\n")

        # Act & Assert
        with pytest.raises(ConfigurationError) as exc_info:
            load_parent_keys(file_path)

        assert "line 2" in str(exc_info.value)

    def test_load_parent_keys_with_invalid_encoding_raises_configuration_error(self, tmp_path):
        """
        Test that undecodable files are reported as configuration errors
        """
        # Arrange
        file_path = tmp_path / 'candidates.csv'
        file_path.write_bytes(b"\xff\xfe\xfa\n")

        # Act & Assert
        with pytest.raises(ConfigurationError) as exc_info:
            load_parent_keys(file_path)

        assert "Unable to read key source" in str(exc_info.value)
