"""
Project module - Output file handling

This module provides:
- generator: format detection, output path resolution and atomic writes
"""

from langbly_sync.project.generator import (
    FileGenerationError,
    detect_format,
    default_source_root,
    resolve_output_path,
    write_file_atomic,
    read_existing_file,
)
