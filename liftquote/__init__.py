"""
liftquote — Capricorn Elevators quotation document generator

Packages:
    forms/      Pricing reconciliation, text layout, template overlay and PDF assembly
    agents/     Outbound quotation email
    core/       Shared configuration, paths, secrets and the quotes log
"""

__version__ = "1.0.0"
