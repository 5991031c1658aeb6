"""Flask glue exposing profile QR codes over HTTP."""

import io

from linkqr.config import RenderConfig
from linkqr.errors import EncodingCapacityExceeded, InvalidInput
from linkqr.logging import audit, get_logger, trace
from linkqr.pipeline import profile_url, render_styled_qr
from linkqr.profiles import ProfileStore, refresh_profile_qr

log = get_logger("server")


@trace
def create_app(store: ProfileStore, base_url: str, config: RenderConfig | None = None):
    """Create a Flask app serving profile QR codes.

    Routes:
        GET /api/profile/<username>/qr  JSON with ``qrCode`` (null when generation failed)
        GET /api/qr?url=...             raw PNG for any target string
    """
    from flask import Flask, Response, abort, jsonify, request

    app = Flask(__name__)

    @app.route("/api/profile/<username>/qr")
    def profile_qr(username):
        record = store.find(username)
        if record is None:
            audit("http.profile_404", logger=log, username=username)
            abort(404)
        qr_code = record.get("qr_code")
        if not qr_code:
            qr_code = refresh_profile_qr(store, username, base_url, config=config)
        return jsonify({
            "username": username,
            "profileUrl": profile_url(base_url, username),
            "qrCode": qr_code,
        })

    @app.route("/api/qr")
    def qr_png():
        url = request.args.get("url", "")
        try:
            image = render_styled_qr(url, config=config)
        except (InvalidInput, EncodingCapacityExceeded) as exc:
            audit("http.qr_rejected", logger=log, error=str(exc))
            return jsonify({"error": str(exc)}), 400
        buf = io.BytesIO()
        image.save(buf, format="PNG")
        return Response(buf.getvalue(), mimetype="image/png")

    return app
