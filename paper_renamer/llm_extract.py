"""
LLM-based metadata extraction for academic PDFs.

Talks to a locally running Ollama server. Model discovery uses Ollama's
native endpoints (/api/ps for loaded models, /api/tags for installed ones);
the completion itself goes through Ollama's OpenAI-compatible endpoint with
the openai client.

Environment variables:
- OLLAMA_HOST: Base URL of the Ollama server (default: http://localhost:11434)

Model naming:
- Any installed Ollama tag, e.g. llama3.2:latest, mistral, qwen2.5:7b
- "auto" picks the first running model, else the first installed one
"""

import json
import logging
import os
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import openai
import requests

from .exceptions import (
    ModelResponseError,
    ModelServiceUnavailableError,
    NoModelAvailableError,
)

log = logging.getLogger(__name__)

DEFAULT_HOST = "http://localhost:11434"
DEFAULT_MODEL = "llama3.2:latest"
AUTO_MODEL = "auto"

# Timeout for the model listing endpoints. Generation uses the openai
# client's own default.
REQUEST_TIMEOUT = 10

REQUIRED_FIELDS = ("first_author", "year", "title")

START_OLLAMA_HINT = (
    "Cannot connect to Ollama at {host}. Please start Ollama first:\n\n"
    "1. If Ollama is not installed, visit: https://ollama.com\n"
    "2. If Ollama is installed, start it with: ollama serve\n"
    "3. Then pull a model, for example: ollama pull llama3.2"
)

INSTALL_MODEL_HINT = (
    "No Ollama models are installed. Please install a model first:\n\n"
    "For example:\n"
    "- ollama pull llama3.2\n"
    "- ollama pull mistral\n\n"
    "Visit https://ollama.com/library for more models"
)

PROMPT_TEMPLATE = """You are analyzing the first page of an academic paper. Extract the following information and respond ONLY with valid JSON in this exact format:
{{
  "first_author": "LastName",
  "year": "YYYY",
  "title": "Full Paper Title"
}}

Rules:
- For first_author: extract ONLY the last name of the first author
- For year: extract the publication year as a 4-digit number
- For title: extract the complete paper title
- Respond with ONLY the JSON, no other text

Paper text:
{text}

JSON response:"""


@dataclass(frozen=True)
class PaperMetadata:
    """Author, year and title of a paper, as shown to and edited by the user."""

    first_author: str
    year: str
    title: str


def get_host(host: Optional[str] = None) -> str:
    """
    Determine the Ollama base URL.

    Args:
        host: Explicit host (from CLI or config). Takes precedence.

    Returns:
        Base URL without a trailing slash.
    """
    host = host or os.environ.get("OLLAMA_HOST") or DEFAULT_HOST
    if not host.startswith(("http://", "https://")):
        # OLLAMA_HOST is commonly set as "127.0.0.1:11434"
        host = f"http://{host}"
    return host.rstrip("/")


def _get_model_names(host: str, endpoint: str) -> List[str]:
    url = f"{host}{endpoint}"
    try:
        response = requests.get(url, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as e:
        raise ModelServiceUnavailableError(START_OLLAMA_HINT.format(host=host)) from e

    try:
        response.raise_for_status()
        data = response.json()
    except requests.HTTPError as e:
        raise ModelResponseError(f"Failed to query Ollama models ({url}): {e}") from e
    except ValueError as e:
        raise ModelResponseError(f"Failed to parse Ollama response from {url}") from e

    models = data.get("models") if isinstance(data, dict) else None
    if not isinstance(models, list):
        raise ModelResponseError(f"Unexpected response from {url}: no model list")
    return [m["name"] for m in models if isinstance(m, dict) and m.get("name")]


def list_running_models(host: Optional[str] = None) -> List[str]:
    """Names of the models currently loaded into memory (GET /api/ps)."""
    return _get_model_names(get_host(host), "/api/ps")


def list_installed_models(host: Optional[str] = None) -> List[str]:
    """Names of the models pulled onto this machine (GET /api/tags)."""
    return _get_model_names(get_host(host), "/api/tags")


def detect_model(host: Optional[str] = None) -> str:
    """
    Detect which Ollama model to use.

    A model that is already loaded answers fastest, so running models are
    preferred over merely installed ones.

    Raises:
        ModelServiceUnavailableError: Ollama is not reachable
        NoModelAvailableError: No model is installed
    """
    installed = list_installed_models(host)
    if not installed:
        raise NoModelAvailableError(INSTALL_MODEL_HINT)

    try:
        running = list_running_models(host)
    except ModelResponseError as e:
        # Older Ollama releases have no /api/ps
        log.debug("Could not list running models: %s", e)
        running = []

    if running:
        log.debug("Using running model %s", running[0])
        return running[0]

    log.debug("No running model, using installed model %s", installed[0])
    return installed[0]


def resolve_model(requested: str, host: Optional[str] = None) -> str:
    """
    Pick the model to query.

    Args:
        requested: Model name from the CLI/config, or "auto"
        host: Ollama base URL

    Returns:
        The installed name of the requested model, or a detected one for "auto".

    Raises:
        NoModelAvailableError: Nothing is installed, or the requested model is not installed
    """
    if requested == AUTO_MODEL:
        return detect_model(host)

    installed = list_installed_models(host)
    if not installed:
        raise NoModelAvailableError(INSTALL_MODEL_HINT)

    candidates = {requested}
    if ":" not in requested:
        candidates.add(f"{requested}:latest")
    for name in installed:
        if name in candidates:
            return name

    raise NoModelAvailableError(
        f"Model '{requested}' is not installed. Installed models: {', '.join(installed)}\n\n"
        f"Pull it with: ollama pull {requested}, or use --model auto"
    )


def _extract_first_json_object(content: str) -> Optional[Dict[str, object]]:
    """Find the first decodable JSON object inside arbitrary text."""
    decoder = json.JSONDecoder()
    for index, char in enumerate(content):
        if char != "{":
            continue
        try:
            candidate, _ = decoder.raw_decode(content[index:])
        except json.JSONDecodeError:
            continue
        if isinstance(candidate, dict):
            return candidate
    return None


def parse_metadata_response(content: Optional[str]) -> PaperMetadata:
    """
    Turn the raw model completion into PaperMetadata.

    Handles markdown code fences and chatty text around the JSON object.

    Raises:
        ModelResponseError: No JSON object found, or a field is missing/empty
    """
    content = (content or "").strip()

    json_match = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", content)
    if json_match:
        content = json_match.group(1)

    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        data = _extract_first_json_object(content)

    if not isinstance(data, dict):
        raise ModelResponseError(
            "Failed to parse metadata from LLM response. "
            "The LLM may not have returned valid JSON."
        )

    fields = {}
    for key in REQUIRED_FIELDS:
        value = data.get(key)
        # Models sometimes return the year as a number
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(int(value))
        if not isinstance(value, str) or not value.strip():
            raise ModelResponseError(
                f"LLM failed to extract all required metadata fields (missing '{key}')"
            )
        fields[key] = value.strip()

    return PaperMetadata(**fields)


def query_llm_for_metadata(
    text: str, model: str = DEFAULT_MODEL, host: Optional[str] = None
) -> PaperMetadata:
    """
    Ask the model for author, year and title of the paper.

    Args:
        text: Extracted text from the PDF
        model: Installed Ollama model name
        host: Ollama base URL

    Returns:
        Parsed PaperMetadata

    Raises:
        ModelServiceUnavailableError: The server could not be reached
        ModelResponseError: API error or unusable completion
    """
    host = get_host(host)
    # Ollama ignores the API key but the client requires one
    client = openai.OpenAI(api_key="ollama", base_url=f"{host}/v1")

    try:
        response = client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": PROMPT_TEMPLATE.format(text=text)}],
            temperature=0.1,
            response_format={"type": "json_object"},
        )
    except openai.APIConnectionError as e:
        raise ModelServiceUnavailableError(START_OLLAMA_HINT.format(host=host)) from e
    except openai.APIError as e:
        raise ModelResponseError(f"Ollama API error: {e}") from e

    if not response.choices:
        raise ModelResponseError("Ollama returned no completion")

    content = response.choices[0].message.content
    log.debug("Raw model response: %r", content)
    return parse_metadata_response(content)


def extract_metadata_with_llm(
    text: str, model: str = DEFAULT_MODEL, host: Optional[str] = None
) -> Tuple[PaperMetadata, str]:
    """
    Extract metadata from PDF text using a local Ollama model.

    This is the main entry point for LLM-based extraction.

    Returns:
        Tuple of (metadata, name of the model actually used)

    Example:
        >>> metadata, model = extract_metadata_with_llm(text)
        >>> metadata
        PaperMetadata(first_author='Vaswani', year='2017', title='Attention Is All You Need')
    """
    model = resolve_model(model, host)
    log.info("Querying %s with %d characters of text", model, len(text))
    return query_llm_for_metadata(text, model=model, host=host), model
