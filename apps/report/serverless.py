"""Function-as-a-service entry point.

``handler(event, context)`` follows the usual serverless HTTP event shape:
the request body is ``event["body"]`` and the reply is a mapping with
``statusCode``, ``headers`` and a JSON ``body``.
"""

import base64
import json
from typing import Any, Dict

from apps.report import ReportHandler
from lib.config.report_loader import resolve_api_key


report_handler = ReportHandler()
API_KEY = resolve_api_key(report_handler.config)


def _body(event: Dict[str, Any]):
    event = event or {}
    body = event.get("body")
    if isinstance(body, dict):
        body = json.dumps(body)
    if body is not None and event.get("isBase64Encoded"):
        try:
            body = base64.b64decode(body)
        except ValueError:
            return None
    return body


def handler(event, context):
    status, payload = report_handler.handle(_body(event), API_KEY)
    return {
        "statusCode": status,
        "headers": {"content-type": "application/json"},
        "body": json.dumps(payload),
    }
