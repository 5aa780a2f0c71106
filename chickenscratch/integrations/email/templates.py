"""Email subjects and Jinja2 HTML bodies for submission notifications."""

from __future__ import annotations

from typing import Any

from jinja2 import DictLoader, Environment, select_autoescape

from chickenscratch.models.enums import EmailTemplate

SUBJECTS: dict[EmailTemplate, str] = {
    EmailTemplate.NEEDS_REVISION: "Chicken Scratch submission needs revision",
    EmailTemplate.ACCEPTED: "Chicken Scratch submission accepted",
    EmailTemplate.DECLINED: "Chicken Scratch submission update",
    EmailTemplate.NEW_SUBMISSION: "New Submission Received: {title}",
}

_LAYOUT = """<!DOCTYPE html>
<html>
  <head><meta charset="utf-8"><title>{{ heading }}</title></head>
  <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <h1 style="color: #2c3e50;">{{ heading }}</h1>
    {% block body %}{% endblock %}
    <p style="border-top: 1px solid #e0e0e0; padding-top: 20px; font-size: 14px; color: #777;">
      <strong>Chicken Scratch</strong><br>Hen &amp; Ink Society
    </p>
  </body>
</html>
"""

_DECISION = """{% extends "layout.html" %}
{% block body %}
<p>{{ message }}</p>
<p><strong>{{ submission.title }}</strong></p>
{% if editor_notes %}
<div style="background-color: #f8f9fa; border-radius: 8px; padding: 16px;">
  <h2 style="font-size: 16px; margin-top: 0;">Editor notes</h2>
  <p style="white-space: pre-wrap;">{{ editor_notes }}</p>
</div>
{% endif %}
<p><a href="{{ site_url }}/mine">View your submissions</a></p>
{% endblock %}
"""

_NEW_SUBMISSION = """{% extends "layout.html" %}
{% block body %}
<p>A new submission has been received and is ready for your review.</p>
<table style="width: 100%; border-collapse: collapse;">
  <tr><td><strong>Title:</strong></td><td>{{ submission.title }}</td></tr>
  <tr><td><strong>Type:</strong></td><td>{{ submission.type }}</td></tr>
  {% if submission.genre %}<tr><td><strong>Genre:</strong></td><td>{{ submission.genre }}</td></tr>{% endif %}
  {% if author_name %}<tr><td><strong>Author:</strong></td><td>{{ author_name }}</td></tr>{% endif %}
  <tr><td><strong>Submission ID:</strong></td><td style="font-family: monospace;">{{ submission.id }}</td></tr>
</table>
<p><a href="{{ site_url }}/committee">View in Committee Dashboard</a></p>
{% endblock %}
"""

_env = Environment(
    loader=DictLoader({
        "layout.html": _LAYOUT,
        "decision.html": _DECISION,
        "new_submission.html": _NEW_SUBMISSION,
    }),
    autoescape=select_autoescape(default=True),
)

_DECISION_COPY: dict[EmailTemplate, tuple[str, str]] = {
    EmailTemplate.ACCEPTED: (
        "Your submission was accepted",
        "Congratulations! The editors have accepted your submission.",
    ),
    EmailTemplate.DECLINED: (
        "An update on your submission",
        "Thank you for sharing your work. The editors have decided not to move forward with this piece.",
    ),
    EmailTemplate.NEEDS_REVISION: (
        "Your submission needs revision",
        "The editors would like you to revise your submission. Their notes are below.",
    ),
}


def render_subject(template: EmailTemplate, **values: Any) -> str:
    return SUBJECTS[template].format(**values)


def render_html(template: EmailTemplate, **values: Any) -> str:
    """Render the HTML body for a template. All values are autoescaped."""
    if template is EmailTemplate.NEW_SUBMISSION:
        return _env.get_template("new_submission.html").render(heading="New Submission Received", **values)
    heading, message = _DECISION_COPY[template]
    return _env.get_template("decision.html").render(heading=heading, message=message, **values)
