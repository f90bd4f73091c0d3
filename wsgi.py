#!/usr/bin/env python3
"""
WSGI entry point for the HL7 to JSON Converter service
"""
import os
import sys

print("🔧 WSGI: Starting import process", flush=True)

# Add the project root to Python path
project_root = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, project_root)

# Import the Flask app
try:
    from src.main import app
    print("🔧 WSGI: Successfully imported Flask app", flush=True)
except Exception as e:
    print(f"❌ WSGI: Failed to import src.main: {e}", flush=True)
    import traceback
    traceback.print_exc()
    raise

# Configure for production
app.config['DEBUG'] = False

# WSGI application
application = app
