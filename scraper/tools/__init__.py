"""
Side tools sharing the browser driver: screenshot, visual diff, performance, AJAX capture.
"""
