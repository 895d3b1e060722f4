#!/usr/bin/env python3
"""
Track3D - GPX Track Viewer Backend
Web application that turns GPX recordings into normalized 3D paths for display.
"""

import os
import time
from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.utils import secure_filename

from track3d.utils.gpx_parser import parse_gpx_text
from track3d.utils.coordinate_normalizer import NormalizerConfig
from track3d.utils.track_payload import build_track_payload
from track3d.utils.app_config import (
    get_cors_origins,
    get_max_upload_bytes,
    parse_env_bool,
)

app = Flask(__name__)
CORS(app, resources={r"/*": {"origins": get_cors_origins()}})

# Configuration
ALLOWED_EXTENSIONS = {'gpx', 'xml'}

app.config['MAX_CONTENT_LENGTH'] = get_max_upload_bytes()


def allowed_file(filename):
    """Check if file has allowed extension."""
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def process_gpx(xml_data, options):
    """
    Parse GPX markup and build the viewer payload.

    Returns:
        tuple: (response dict, HTTP status)
    """
    config = NormalizerConfig.from_options(options)
    flatten = parse_env_bool(options.get('flatten'), default=True)

    t_start = time.time()
    track = parse_gpx_text(xml_data)
    if track.error:
        return {'error': track.error, 'data_size': len(xml_data)}, 400

    payload = build_track_payload(track, config, flatten=flatten)
    t_total = time.time() - t_start
    print(
        f"[PERF] Processed {payload['stats']['point_count']} points in "
        f"{payload['stats']['segment_count']} segments in {t_total:.3f}s"
    )
    return {'success': True, 'data_size': len(xml_data), 'data': payload}, 200


@app.route('/api/upload', methods=['POST'])
def upload_gpx():
    """Handle GPX file upload. The file is processed in memory and never stored."""
    try:
        if 'file' not in request.files:
            return jsonify({'error': 'No file provided'}), 400

        file = request.files['file']
        if file.filename == '':
            return jsonify({'error': 'No file selected'}), 400

        if not allowed_file(file.filename):
            return jsonify({'error': 'Invalid file type. Only GPX or XML files allowed'}), 400

        result, status = process_gpx(file.read(), request.form.to_dict())
        result['filename'] = secure_filename(file.filename) or 'track.gpx'
        return jsonify(result), status

    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        print(f"[ERROR] /api/upload failed: {str(e)}")
        return jsonify({'error': str(e)}), 500


@app.route('/api/track', methods=['POST'])
def process_track():
    """Normalize GPX markup posted as JSON: {"gpx": "...", "options": {...}}."""
    try:
        data = request.get_json(silent=True) or {}
        xml_data = data.get('gpx')
        options = data.get('options') or {}

        if not isinstance(xml_data, str) or not xml_data.strip():
            return jsonify({'error': 'No GPX data provided'}), 400
        if not isinstance(options, dict):
            return jsonify({'error': 'Options must be an object'}), 400

        result, status = process_gpx(xml_data, options)
        return jsonify(result), status

    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        print(f"[ERROR] /api/track failed: {str(e)}")
        return jsonify({'error': str(e)}), 500


@app.route('/api/health', methods=['GET'])
def health():
    """Health check endpoint."""
    return jsonify({
        'status': 'healthy',
        'service': 'Track3D'
    })


if __name__ == '__main__':
    debug_enabled = parse_env_bool(os.getenv('TRACK3D_DEBUG'), default=False)
    app.run(host='0.0.0.0', port=5001, debug=debug_enabled)
