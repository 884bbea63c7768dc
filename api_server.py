#!/usr/bin/env python3
"""
Genealogy Tree Recomposer API Server
Fetches a genealogy tree document for a DNI, OCRs it, picks the photo-like
grid cells and publishes a recomposed poster under /public.
"""

import os
import re
import logging
from datetime import datetime, timezone
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from flask import Flask, request, jsonify, send_from_directory
from flask_cors import CORS

# --- Centralized Logging Configuration ---
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
    datefmt='%H:%M:%S'
)

# Import services and pipeline
from models.errors import ProcessingError
from services.asset_service import AssetService, PUBLIC_DIR
from pipeline.genealogy_pipeline import process_dni

app = Flask(__name__)
CORS(app)  # Enable CORS for frontend communication

DNI_PATTERN = re.compile(r"^\d{6,}$")

# Process-wide asset cache; initialised once in main() before serving
asset_service = AssetService(public_dir=PUBLIC_DIR)

logger = logging.getLogger(__name__)


@app.route('/agv-proc', methods=['GET'])
def agv_proc():
    """Recompose the genealogy tree image for ?dni=<digits>."""
    dni = str(request.args.get('dni', '')).strip()
    if not DNI_PATTERN.match(dni):
        return jsonify({'error': 'Invalid dni parameter. Example: ?dni=10001088'}), 400

    try:
        result = process_dni(dni, request.host_url, asset_service=asset_service)
        return jsonify(result)
    except ProcessingError as e:
        logger.error(f"Processing failed for DNI {dni}: {e}")
        return jsonify({'error': 'Error processing image', 'detail': str(e)}), 500


@app.route('/public/<path:filename>')
def serve_public(filename):
    """Serve generated posters and cached assets."""
    return send_from_directory(os.path.abspath(asset_service.public_dir), filename)


@app.route('/status', methods=['GET'])
def status():
    """Health check endpoint."""
    return jsonify({'status': 'ok', 'timestamp': datetime.now(timezone.utc).isoformat()})


@app.errorhandler(404)
def not_found(e):
    return jsonify({'error': 'Not found'}), 404


@app.errorhandler(500)
def internal_error(e):
    """Handle internal server error."""
    logger.error(f"Internal server error: {e}")
    return jsonify({'error': 'Internal server error'}), 500


def main():
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "3000"))

    asset_service.ensure_assets()

    logger.info(f"Public directory: {asset_service.public_dir.resolve()}")
    logger.info(f"Serving on http://{host}:{port}")
    app.run(host=host, port=port, threaded=True)


if __name__ == '__main__':
    main()
