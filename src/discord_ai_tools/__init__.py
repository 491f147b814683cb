"""Discord AI Tools.

Backend for the Discord content generators: templated prompts forwarded to an
LLM completion API behind an in-memory response cache.
"""

__version__ = "0.1.0"

from .config import AppConfig, ConfigError, configure_logging
from .generators import ContentGenerator, GeneratorTemplate, UnknownGeneratorError, get_template
from .llm.cache import ResponseCache
from .llm.exceptions import GenerationFailed, GenerationFailedError
from .llm.factory import create_text_generator_from_config
from .llm.text_generator import TextGenerator

__all__ = [
    "AppConfig",
    "ConfigError",
    "ContentGenerator",
    "GenerationFailed",
    "GenerationFailedError",
    "GeneratorTemplate",
    "ResponseCache",
    "TextGenerator",
    "UnknownGeneratorError",
    "configure_logging",
    "create_text_generator_from_config",
    "get_template",
]
