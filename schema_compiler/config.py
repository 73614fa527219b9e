# Copyright 2025 TIER IV, inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.


"""Configuration management for the schema compiler."""

import os
import logging
from dataclasses import dataclass

from .utils.logging_utils import configure_split_stream_logging


@dataclass
class CompilerConfig:
    """Configuration class for compiler limits and logging."""
    max_depth: int = 200
    max_ref_hops: int = 64
    max_closure_size: int = 100000
    default_dialect: str = "2020-12"
    log_level: str = "INFO"
    print_level: str = "ERROR"

    @classmethod
    def from_env(cls) -> 'CompilerConfig':
        """Create configuration from environment variables."""
        return cls(
            max_depth=int(os.getenv('SCHEMA_COMPILER_MAX_DEPTH', '200')),
            max_ref_hops=int(os.getenv('SCHEMA_COMPILER_MAX_REF_HOPS', '64')),
            max_closure_size=int(os.getenv('SCHEMA_COMPILER_MAX_CLOSURE_SIZE', '100000')),
            default_dialect=os.getenv('SCHEMA_COMPILER_DEFAULT_DIALECT', '2020-12'),
            log_level=os.getenv('SCHEMA_COMPILER_LOG_LEVEL', 'INFO'),
            print_level=os.getenv('SCHEMA_COMPILER_PRINT_LEVEL', 'ERROR'),
        )

    def set_logging(self) -> logging.Logger:
        """Setup logging for the ``schema_compiler`` logger based on configuration."""
        level = getattr(logging, self.log_level.upper(), logging.INFO)
        stderr_level = getattr(logging, self.print_level.upper(), logging.ERROR)

        formatter = logging.Formatter('%(name)s - %(levelname)s - %(message)s')
        return configure_split_stream_logging(
            logger_name='schema_compiler',
            level=level,
            stderr_level=stderr_level,
            formatter=formatter,
        )


# Global configuration instance
compiler_config = CompilerConfig.from_env()
