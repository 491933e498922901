import sys
import logging
from pathlib import Path

# Set up the script directory and ensure it's in sys.path
script_directory = Path(__file__).resolve().parent
if str(script_directory) not in sys.path:
    sys.path.append(str(script_directory))

from dotenv import load_dotenv

import argparse
import uvicorn

from src.settings import env_file_path

logger = logging.getLogger("uvicorn.error")

if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--port", type=int, default=8086)
    ap.add_argument("--env", type=str, default="dev")

    args = ap.parse_args()

    # Load secrets/env.<env> relative to this script so it works regardless of CWD
    env_path = env_file_path(args.env)
    if env_path.exists():
        load_dotenv(env_path, override=True)
    else:
        logger.warning("No environment file for '%s' at %s; using process environment.", args.env, env_path)

    #This is the last thing to do because settings are read when the app module loads
    from app import app
    uvicorn.run(app, host="0.0.0.0", port=args.port)
