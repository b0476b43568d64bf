"""Translation job API routes."""

from __future__ import annotations

import re
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Blueprint, current_app, jsonify, request

from langbly_sync.config import LANG_PLACEHOLDER, ConfigError, PipelineConfig, load_config
from langbly_sync.client.service import validate_client_config
from langbly_sync.exceptions import TranslationError
from langbly_sync.logger import get_logger
from langbly_sync.translation.manager import TranslationManager
from langbly_sync.web.tasks import cancel_job, create_translation_job, get_job, serialize_job

translation_bp = Blueprint("translation", __name__)
logger = get_logger(__name__)

# ISO 639 code with optional BCP 47 subtags (fr, pt-BR, zh_Hant); codes end up in output paths
LANGUAGE_CODE_PATTERN = re.compile(r"^[A-Za-z]{2,3}(?:[-_][A-Za-z0-9]{2,8})*$")


def _app_config() -> Dict[str, Any]:
    """Application config: the one injected into the Flask app, else config.json."""
    return current_app.config.get("LANGBLY_CONFIG") or load_config()


def _workspace_root(app_config: Dict[str, Any]) -> Path:
    web_config = app_config.get("web") or {}
    return Path(web_config.get("workspace_root") or ".").resolve()


def _confine(path: Optional[str], root: Path, field: str) -> Optional[str]:
    """Absolute form of a request path; ConfigError when it leaves the workspace."""
    if path is None:
        return None
    resolved = (root / path).resolve()
    if not resolved.is_relative_to(root):
        raise ConfigError(f"{field} must stay inside the workspace: {path}")
    return str(resolved)


def _confine_to_workspace(pipeline_config: PipelineConfig, root: Path) -> PipelineConfig:
    """Reject paths and language codes that would read or write outside the workspace."""
    for lang in pipeline_config.target_languages:
        if not LANGUAGE_CODE_PATTERN.match(lang.strip()):
            raise ConfigError(f"Invalid target language code: {lang!r}")

    # Output files land under the part before "**" (or the whole pattern);
    # checked with a sample code, the real codes were validated above
    pattern = pipeline_config.output_pattern
    output_base = pattern.split("**")[0] if "**" in pattern else pattern
    _confine(output_base.replace(LANG_PLACEHOLDER, "xx"), root, "output_pattern")

    files = [_confine(f, root, "files") for f in pipeline_config.files]
    source_root = _confine(pipeline_config.source_root, root, "source_root")
    if source_root is not None:
        # Relative paths under source_root are reused below the output base
        outside = [f for f in files if not Path(f).is_relative_to(source_root)]
        if outside:
            raise ConfigError(f"files must be inside source_root: {', '.join(outside)}")

    return replace(
        pipeline_config,
        files=files,
        output_pattern=str(root / pattern),
        source_root=source_root,
    )


@translation_bp.post("/translate")
def start_translation_job():
    """Start an asynchronous translation run."""
    data: Dict[str, Any] = request.get_json(silent=True) or {}

    try:
        app_config = _app_config()
    except ConfigError as e:
        logger.error("Failed to load configuration: %s", e)
        return jsonify({"error": str(e), "code": "config_error"}), 500

    try:
        pipeline_config = _confine_to_workspace(PipelineConfig.from_dict(data), _workspace_root(app_config))
    except ConfigError as e:
        logger.warning("Rejected translation request: %s", e)
        return jsonify({"error": str(e), "code": "invalid_request"}), 400

    # Dry runs never reach the service, so they work without an API key
    if not pipeline_config.dry_run:
        try:
            validate_client_config(app_config)
        except TranslationError as e:
            logger.warning("Langbly configuration validation failed: %s", e)
            error_response = {"error": str(e), "code": e.code or "api_config_error"}
            if e.details:
                error_response["details"] = e.details
            return jsonify(error_response), 400

    job = create_translation_job(
        pipeline_config,
        app_config=app_config,
        manager_factory=current_app.config.get("LANGBLY_MANAGER_FACTORY") or TranslationManager,
    )
    return jsonify({"job_id": job.job_id, "job": serialize_job(job)}), 202


@translation_bp.get("/jobs/<job_id>")
def get_translation_job(job_id: str):
    """Return the current state of a job."""
    job = get_job(job_id)
    if not job:
        return jsonify({"error": "Job not found"}), 404
    return jsonify({"job": serialize_job(job)})


@translation_bp.post("/jobs/<job_id>/cancel")
def cancel_translation_job(job_id: str):
    """Request cancellation of a running job."""
    job = get_job(job_id)
    if not job:
        return jsonify({"error": "Job not found"}), 404
    if not cancel_job(job_id):
        return jsonify({"error": f"Job already {job.state}", "job": serialize_job(job)}), 409
    return jsonify({"job": serialize_job(job)})
