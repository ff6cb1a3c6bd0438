"""Utility modules for isp-pricing-verifier (console output, logging, time)."""
