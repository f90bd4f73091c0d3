#!/usr/bin/env python3
"""
Deployment entry point for the HL7 to JSON Converter service
"""
import os
import sys

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

# Import the Flask app
from src.main import app

# Configure for deployment
app.config['DEBUG'] = False

PORT = int(os.environ.get('PORT', 5000))

if __name__ == "__main__":
    print("🚀 Starting HL7 to JSON Converter...")
    print(f"📊 Running on port {PORT}")

    app.run(
        host='0.0.0.0',
        port=PORT,
        debug=False,
        threaded=True
    )
