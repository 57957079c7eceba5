#!/usr/bin/env python3
"""
Backend startup wrapper - runs the API under uvicorn.
"""
import os
import sys

# Add workspace to path
workspace_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, workspace_root)

if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    print("[Backend] Starting EcoTrack Backend")
    print(f"[Backend] Server: http://localhost:{port}")
    print("[Backend] Press CTRL+C to stop")
    try:
        uvicorn.run(
            "ecotrack.main:app",
            host="0.0.0.0",
            port=port,
            reload=False,
            log_level="info",
            access_log=True,
        )
    except KeyboardInterrupt:
        print("\n[Backend] Shutting down...")
        sys.exit(0)
