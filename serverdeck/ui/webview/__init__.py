"""QtWebEngine content views and the page bridge."""
