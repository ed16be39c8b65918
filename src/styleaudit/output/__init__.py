"""Report rendering — JSON, terminal, JUnit, HTML."""
