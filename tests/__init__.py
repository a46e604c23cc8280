"""
Test Suite for the GTD Engine

- Task & project model
- Dependency resolver and analysis
- Lifecycle engine scans and transitions
- Recommendation scoring and selection
- Recurrence, priority scoring, configuration
"""
