"""Services behind the page routes.

Error boundary reporting, the image domain allowlist and the external
package check.
"""
