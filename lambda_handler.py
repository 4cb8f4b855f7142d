"""
AWS Lambda handler for the Commission Engine API.

This is the production entry point for AWS Lambda deployments.
For local development, use main.py (Flask app) instead.
"""

import base64
import json
import logging
import os

from commission_engine.errors import MissingConfigurationError
from commission_engine.processor import CommissionRequestProcessor

# Configure logging
logger = logging.getLogger()
logger.setLevel(os.environ.get("LOG_LEVEL", "INFO"))

# Environment (dev, staging, prod)
ENVIRONMENT = os.environ.get("ENVIRONMENT", "dev")

# Initialize processor (reused across warm invocations)
processor = CommissionRequestProcessor()

# CORS headers for API Gateway
CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
}


def _response(status_code, body):
    return {"statusCode": status_code, "headers": CORS_HEADERS, "body": json.dumps(body)}


def lambda_handler(event, context):
    """
    Main Lambda entry point.

    Handles API Gateway events for:
    - GET /health
    - GET /api
    - POST /calculate_commission
    - OPTIONS (CORS preflight)
    """
    # Handle CORS preflight
    http_method = event.get("httpMethod") or event.get("requestContext", {}).get("http", {}).get("method", "")
    if http_method == "OPTIONS":
        return {"statusCode": 200, "headers": CORS_HEADERS, "body": ""}

    # Get path (supports both REST API and HTTP API formats)
    path = event.get("path") or event.get("rawPath", "")

    if path == "/health" and http_method == "GET":
        return handle_health()
    elif path == "/calculate_commission" and http_method == "POST":
        return handle_calculate_commission(event)
    elif path == "/api" and http_method == "GET":
        return handle_api_info()
    else:
        return _response(404, {"error": "Not found", "path": path})


def handle_health():
    """Health check endpoint."""
    return _response(200, {"status": "healthy", "environment": ENVIRONMENT})


def handle_api_info():
    """API information endpoint."""
    return _response(
        200,
        {
            "status": "ok",
            "message": "Sales Commission Engine API",
            "version": "1.0",
            "environment": ENVIRONMENT,
            "runtime": "AWS Lambda",
            "endpoints": {"calculate_commission": "/calculate_commission [POST]", "health": "/health [GET]"},
        },
    )


def handle_calculate_commission(event):
    """Calculate the commission for one invoice."""
    try:
        body = event.get("body")
        if body is None or isinstance(body, str):
            if not body:
                return _response(400, {"error": "No input data provided", "status": "failed"})
            # Handle base64 encoded body (API Gateway)
            if event.get("isBase64Encoded"):
                body = base64.b64decode(body).decode("utf-8")
            input_data = json.loads(body)
        else:
            input_data = body

        processor.check_request_shape(input_data)
        invoice_ref = processor.invoice_reference(input_data)
        logger.info(f"Calculating commission for invoice: {invoice_ref}")

        result = processor.process_from_dict(input_data)

        logger.info(f"Commission calculated for invoice: {invoice_ref}")

        return _response(200, result)

    except json.JSONDecodeError as e:
        logger.error(f"JSON parse error: {str(e)}")
        return _response(400, {"error": f"Invalid JSON: {str(e)}", "status": "failed"})

    except MissingConfigurationError as e:
        logger.error(f"Missing configuration: {str(e)}")
        return _response(422, {"error": str(e), "status": "missing_configuration"})

    except (ValueError, KeyError, TypeError) as e:
        # Validation errors from the request (missing fields, invalid types, etc.)
        logger.error(f"Validation error: {str(e)}")
        return _response(400, {"error": f"Validation error: {str(e)}", "status": "validation_failed"})

    except Exception as e:
        # Unexpected errors - log details but return generic message to avoid information disclosure
        logger.error(f"Unexpected processing error: {str(e)}", exc_info=True)
        return _response(500, {"error": "An unexpected error occurred during processing", "status": "failed"})
