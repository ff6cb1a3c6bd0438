"""
ISP Pricing Verifier.

Drives ISP storefront pricing pages from an address to the generated plan
page and verifies that every advertised package and price is rendered.
"""
