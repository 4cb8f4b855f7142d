from flask import Flask, request, jsonify
from flask_cors import CORS
from commission_engine.errors import MissingConfigurationError
from commission_engine.processor import CommissionRequestProcessor
import os
import logging

# Configure logging
logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)

app = Flask(__name__)

# Enable CORS for all routes (admin and AE dashboards call the API from the browser)
CORS(app)

# Initialize the request processor
processor = CommissionRequestProcessor()


@app.route("/api", methods=["GET"])
def api_info():
    """API information endpoint"""
    return jsonify({
        "status": "ok",
        "message": "Sales Commission Engine API",
        "version": "1.0",
        "endpoints": {
            "calculate_commission": "/calculate_commission [POST]",
            "health": "/health [GET]"
        }
    }), 200


@app.route("/health", methods=["GET"])
def health():
    """Health check for monitoring"""
    return jsonify({"status": "healthy"}), 200


@app.route("/calculate_commission", methods=["POST"])
def calculate_commission():
    """
    Calculate the commission for one invoice
    """
    try:
        input_data = request.get_json(force=True, silent=True)

        if not input_data:
            return jsonify({
                "error": "No input data provided",
                "status": "failed"
            }), 400

        processor.check_request_shape(input_data)
        invoice_ref = processor.invoice_reference(input_data)
        logger.info(f"Calculating commission for invoice: {invoice_ref}")

        result = processor.process_from_dict(input_data)

        logger.info(
            f"Commission calculated for invoice {invoice_ref}: "
            f"{result['commission_summary']['total_commission']}"
        )

        return jsonify(result), 200

    except MissingConfigurationError as e:
        logger.error(f"Missing configuration: {str(e)}")
        return jsonify({
            "error": str(e),
            "status": "missing_configuration"
        }), 422

    except (ValueError, KeyError, TypeError) as e:
        # Validation errors (missing fields, invalid types, out-of-range values)
        logger.error(f"Validation error: {str(e)}")
        return jsonify({
            "error": f"Validation error: {str(e)}",
            "status": "validation_failed"
        }), 400

    except Exception as e:
        logger.error(f"Unexpected processing error: {str(e)}", exc_info=True)
        return jsonify({
            "error": "An unexpected error occurred during processing",
            "status": "failed"
        }), 500


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    app.run(host="0.0.0.0", port=port, debug=False)
