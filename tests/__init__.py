"""
RELGRAPH Test Suite

- test_subsets.py: pair enumeration
- test_dimension_classifier.py, test_key_classifier.py,
  test_relationship_classifier.py: classifiers
- test_inference_engine.py: full passes
- test_statistics_gateway.py: PostgreSQL and DataFrame gateways
- test_facts.py, test_serializers.py: fact models and renderings
- test_config.py, test_cli.py, test_api.py: configuration and surfaces
"""
