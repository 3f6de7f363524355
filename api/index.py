# =============================================================================
# Trackball API - Serverless Entry Point
# Flask WSGI application wrapper for the Python serverless runtime
# =============================================================================

import os
import sys

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from trackball import create_app

# The serverless builder picks up the module-level `app` WSGI callable
app = create_app(os.environ.get('FLASK_ENV', 'production'))
