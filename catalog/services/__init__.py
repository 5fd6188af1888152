"""
Services module for catalog reconciliation.

Contains:
- classifier: Rule-table brand/category classification
- duplicate_grouper: Canonical-key partitioning and survivor ranking
- rule_loader: Loads rule tables from the database or the defaults
- reconciliation: The catalog reconciler (classify, dedupe, compact)
- image_resolver: Primary image resolution over ordered providers
"""
