"""
Configuration layer for isp-pricing-verifier.

Modules:
    constants: Matching constants and default timeouts
    schema: Pydantic models of pricing.config.yaml
    loader: YAML loading and brand-reference validation
"""
