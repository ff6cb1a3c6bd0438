"""Allow running as ``python -m isp_pricing_verifier``."""

from isp_pricing_verifier.cli import app

if __name__ == "__main__":
    app()
