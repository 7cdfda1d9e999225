import os
import sys
import tempfile
from pathlib import Path


# Keep tests deterministic and local-only.
os.environ["MEDSCAN_SKIP_DOTENV"] = "1"
os.environ["MEDSCAN_UPLOAD_DIR"] = tempfile.mkdtemp(prefix="medscan-test-uploads-")
os.environ["MEDSCAN_OCR_BACKEND"] = "mock"
os.environ["MEDSCAN_LLM_BACKEND"] = "mock"
os.environ["MEDSCAN_ANALYSIS_MODE"] = "text"
os.environ["MEDSCAN_LLM_RETRY_DELAY_MS"] = "0"
os.environ["OCR_API_KEY"] = ""
os.environ["OPENROUTER_API_KEY"] = ""

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))
