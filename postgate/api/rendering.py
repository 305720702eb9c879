"""Presentation of approve/reject outcomes.

Handlers produce an ``ActionOutcome``; ``present`` renders it as the JSON
envelope or as an HTML page, depending on the request's Accept header.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import HTMLResponse, JSONResponse, Response
from jinja2 import Environment, select_autoescape

from postgate.api.schemas.common import error_body, success_body
from postgate.core.exceptions import GatewayError, InvalidStateError, NotFoundError

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{{ title }} - {{ app_name }}</title>
  <style>
    * { box-sizing: border-box; margin: 0; padding: 0; }
    body {
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif;
      background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
      min-height: 100vh;
      display: flex;
      align-items: center;
      justify-content: center;
      padding: 20px;
    }
    .card {
      background: white;
      border-radius: 16px;
      box-shadow: 0 10px 40px rgba(0, 0, 0, 0.2);
      padding: 40px;
      max-width: 500px;
      width: 100%;
      text-align: center;
    }
    .icon { font-size: 64px; margin-bottom: 20px; }
    h1 { color: #333; margin-bottom: 16px; font-size: 24px; }
    .message {
      background: {{ palette.bg }};
      border: 1px solid {{ palette.border }};
      color: {{ palette.text }};
      padding: 16px;
      border-radius: 8px;
      margin-bottom: 24px;
      font-size: 16px;
    }
    .back-link { color: #667eea; text-decoration: none; font-weight: 500; }
    .back-link:hover { text-decoration: underline; }
  </style>
</head>
<body>
  <div class="card">
    <div class="icon">{{ icon }}</div>
    <h1>{{ title }}</h1>
    <div class="message">{{ message }}</div>
    <a href="/" class="back-link">&larr; Back to Dashboard</a>
  </div>
</body>
</html>
"""

PALETTES = {
    "success": {"bg": "#d4edda", "border": "#c3e6cb", "text": "#155724", "icon": "✅"},
    "error": {"bg": "#f8d7da", "border": "#f5c6cb", "text": "#721c24", "icon": "❌"},
    "warning": {"bg": "#fff3cd", "border": "#ffeeba", "text": "#856404", "icon": "⚠️"},
}

_env = Environment(autoescape=select_autoescape(default_for_string=True))
_page = _env.from_string(PAGE_TEMPLATE)


@dataclass
class ActionOutcome:
    """Result of an approve/reject request, independent of its rendering."""

    status_code: int
    title: str
    message: str
    kind: str = "success"
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    page_message: Optional[str] = None  # HTML wording, when it differs from the JSON message

    @classmethod
    def from_error(cls, exc: GatewayError) -> "ActionOutcome":
        if isinstance(exc, InvalidStateError):
            title, kind = "Already Processed", "warning"
        elif isinstance(exc, NotFoundError):
            title, kind = "Not Found", "error"
        else:
            title, kind = "Error", "error"
        return cls(
            status_code=exc.status_code,
            title=title,
            message=exc.message,
            kind=kind,
            error=exc.category,
        )


def wants_json(request: Request) -> bool:
    return "application/json" in request.headers.get("accept", "")


def render_page(title: str, message: str, kind: str, app_name: str) -> str:
    palette = PALETTES[kind]
    return _page.render(
        title=title,
        message=message,
        palette=palette,
        icon=palette["icon"],
        app_name=app_name,
    )


def present(request: Request, outcome: ActionOutcome, app_name: str) -> Response:
    """Render ``outcome`` as JSON or HTML depending on the Accept header."""
    if wants_json(request):
        if outcome.error:
            body = error_body(outcome.error, outcome.message)
        else:
            body = success_body(outcome.data, message=outcome.message)
        return JSONResponse(status_code=outcome.status_code, content=body)

    html = render_page(outcome.title, outcome.page_message or outcome.message, outcome.kind, app_name)
    return HTMLResponse(status_code=outcome.status_code, content=html)
