"""
OpenGrammar - bring-your-own-key AI text processor

Send text to a language model with an action (fix grammar, improve,
rephrase, make formal, expand, or a custom instruction) and get back the
model's analysis and the transformed text as separate sections.
"""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("open-grammar")
except PackageNotFoundError:
    __version__ = "0.0.0"  # Not installed

from .parser import ParsedResult, parse_response

__all__ = ["ParsedResult", "parse_response", "__version__"]
