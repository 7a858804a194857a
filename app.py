#!/usr/bin/env python3
"""
Receipt Printer - Flask service that prints text and images on a thermal receipt printer.

Run with:
    python app.py
or under a WSGI server:
    gunicorn --threads 8 'app:app'
"""

import os

from receipt_printer import create_app

app = create_app()

if __name__ == "__main__":
    host = os.environ.get("RECEIPTPRINTER_HOST", "0.0.0.0")
    port = int(os.environ.get("RECEIPTPRINTER_PORT", 3000))
    app.logger.info("Starting Receipt Printer on http://%s:%d", host, port)
    app.logger.info("Press Ctrl+C to stop the server")
    app.run(host=host, port=port, debug=False, threaded=True)
