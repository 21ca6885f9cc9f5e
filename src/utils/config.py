# ========================
# src/utils/config.py
# ========================

"""
Configuration Management

Centralized configuration for the cleaning pipeline with environment support.
"""

import os
import json
from pathlib import Path
from typing import Dict, Any, Optional


class Config:
    """
    Configuration class for the cleaning pipeline.
    Supports environment variables and default values.
    """

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration.

        Args:
            config_dict (dict): Optional configuration overrides
        """
        # Data Processing Configuration
        self.DEFAULT_CHUNK_SIZE = int(os.getenv('PIPELINE_CHUNK_SIZE', '1000'))

        # File Paths
        self.DEFAULT_INPUT_FILE = os.getenv('PIPELINE_INPUT_FILE', 'data/raw/employees.csv')
        self.DEFAULT_OUTPUT_DIR = os.getenv('PIPELINE_OUTPUT_DIR', 'data/processed')
        self.UPLOAD_DIR = os.getenv('PIPELINE_UPLOAD_DIR', 'data/uploaded')

        # Data Generation Settings
        self.DEFAULT_SAMPLE_ROWS = int(os.getenv('SAMPLE_ROWS', '1000'))

        # Business Rules
        self.SALARY_CAP = int(os.getenv('SALARY_CAP', '1000000'))
        self.SALARY_FLOOR = int(os.getenv('SALARY_FLOOR', '0'))
        self.DEFAULT_EMAIL = os.getenv('DEFAULT_EMAIL', 'noemail@company.com')
        self.ENFORCE_SALARY_CONSTRAINT = os.getenv('ENFORCE_SALARY_CONSTRAINT', 'true').lower() == 'true'

        # API Settings
        self.API_PORT = int(os.getenv('API_PORT', '8000'))

        # Logging Configuration
        self.LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

        # Data Quality Settings
        self.ENABLE_DATA_PROFILING = os.getenv('ENABLE_DATA_PROFILING', 'true').lower() == 'true'

        if config_dict:
            self._update_from_dict(config_dict)

    def _update_from_dict(self, config_dict: Dict[str, Any]) -> None:
        """Update configuration from dictionary."""
        for key, value in config_dict.items():
            if hasattr(self, key.upper()):
                setattr(self, key.upper(), value)

    def get_data_paths(self) -> Dict[str, Path]:
        """Get all configured data paths as Path objects."""
        return {
            'input_file': Path(self.DEFAULT_INPUT_FILE),
            'output_dir': Path(self.DEFAULT_OUTPUT_DIR),
            'upload_dir': Path(self.UPLOAD_DIR),
            'raw_data_dir': Path('data/raw'),
            'logs_dir': Path('logs')
        }

    def ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        paths = self.get_data_paths()
        for path_name, path in paths.items():
            if path_name.endswith('_dir'):
                path.mkdir(parents=True, exist_ok=True)

    def validate_config(self) -> Dict[str, bool]:
        """
        Validate configuration values.

        Returns:
            dict: Validation results for each setting
        """
        validations = {}

        validations['chunk_size'] = self.DEFAULT_CHUNK_SIZE > 0
        validations['sample_rows'] = self.DEFAULT_SAMPLE_ROWS > 0
        validations['salary_range'] = 0 <= self.SALARY_FLOOR <= self.SALARY_CAP
        validations['default_email'] = '@' in self.DEFAULT_EMAIL
        validations['api_port'] = 1000 <= self.API_PORT <= 65535

        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        validations['log_level'] = self.LOG_LEVEL.upper() in valid_log_levels

        return validations

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            attr: getattr(self, attr)
            for attr in dir(self)
            if not attr.startswith('_') and not callable(getattr(self, attr))
        }

    def save_to_file(self, file_path: str) -> None:
        """Save configuration to JSON file."""
        with open(file_path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2, default=str)

    @classmethod
    def load_from_file(cls, file_path: str) -> 'Config':
        """Load configuration from JSON file."""
        with open(file_path, 'r') as f:
            config_dict = json.load(f)
        return cls(config_dict)

    def __str__(self) -> str:
        lines = ["Configuration Settings:"]
        config_dict = self.to_dict()
        for key, value in sorted(config_dict.items()):
            lines.append(f"  {key}: {value}")
        return "\n".join(lines)
