import os
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

import yaml

DEFAULT_MESSAGES: dict = {
    "success": "All committers are covered by a CLA and signed off their commits.",
    "failure": "Some committers failed IP validation.",
    "unknown": "The validation status of this pull request could not be determined.",
    "bad_clas": "No CLA on file for: ",
    "unknown_users": "CLA status unknown for: ",
    "bad_signatures": "Signed-off-by does not match committer: ",
    "missing_signatures": "Missing Signed-off-by: ",
}

DEFAULT_CONFIG: dict = {
    "cla_service_url": None,  # required; identifier is appended to this URL
    "github_endpoint_url": "https://api.github.com",
    "service_url": "https://localhost/webhook",
    "admin_email": None,
    "mail_from": "noreply@localhost",
    "mail_subject_prefix": "prgate",
    "notifier": "noop",
    "smtp_host": "localhost",
    "smtp_port": 25,
    "status_context": "ip-validation",
    "bug_tracker_org": "eclipse",
    "bug_tracker_url": "https://bugs.{org}.org/bugs/show_bug.cgi?id={id}",
    "request_timeout": 10,
    "store": "noop",
    "messages": DEFAULT_MESSAGES,
}


def load_config(config_path: str = ".prgate.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prgate.yml in the current directory
      3. CLI argument overrides

    The ``messages`` catalog is merged per key, so a file that overrides one
    message keeps the built-in text for the rest.
    """
    config = {**DEFAULT_CONFIG, "messages": dict(DEFAULT_MESSAGES)}

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        messages = file_config.pop("messages", None) or {}
        config.update(file_config)
        config["messages"].update(messages)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Resolve credentials from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    config["smtp_user"] = os.environ.get("PRGATE_SMTP_USER")
    config["smtp_password"] = os.environ.get("PRGATE_SMTP_PASSWORD")

    return config


def service_base_url(config: dict) -> str:
    """Return the service URL minus its last path segment, never above scheme and host.

    Statuses whose target URL starts with this prefix were reported by this
    service; detail links are built under it.
    """
    parts = urlsplit(config["service_url"])
    path = parts.path.rstrip("/").rsplit("/", 1)[0]
    return f"{parts.scheme}://{parts.netloc}{path}"


def details_url(config: dict, audit_key: str) -> str:
    return f"{service_base_url(config)}/status_details?id={audit_key}"
