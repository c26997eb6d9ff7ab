"""Quotation PDF generation.

Key exports:
    reconcile()            — Map free-form pricing items onto the 11 canonical rows
    compute_totals()       — Standard / launch subtotals, GST and grand totals
    to_words()             — Indian-numbering amount in words for the legal total
    generate_quote_pdf()   — Overlay a quotation onto the 9-page template, return bytes
"""
