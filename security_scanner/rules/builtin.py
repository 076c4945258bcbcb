"""Security rules that ship with the scanner.

User rule directories can extend this set or re-use any of these classes
through ``use: <rule id>`` descriptors.
"""

from __future__ import annotations

import re
from typing import List, Type

from security_scanner.severity import Severity

from .base import Rule

JS_TS_FILE = re.compile(r"\.(js|ts)$")


class HardcodedSecretsRule(Rule):
    id = "RULE-90"
    name = "Hardcoded Credentials"
    severity = Severity.CRITICAL
    description = "Hardcoded credentials found. Use environment variables instead."
    recommendation = (
        "Move secrets to environment variables or secure vault "
        "(e.g., AWS Secrets Manager, HashiCorp Vault)"
    )
    pattern = r"(password|secret|api[_-]?key|token|pwd|passwd|auth|credential)[\s=:]+['\"]\w+['\"]"
    metadata = {
        "category": "secrets",
        "ciaImpact": "Confidentiality",
        "owasp": "A02:2021 – Cryptographic Failures",
        "cwe": "CWE-798: Use of Hard-coded Credentials",
    }


class SqlInjectionRule(Rule):
    id = "RULE-80-SQL"
    name = "SQL Injection Risk"
    severity = Severity.CRITICAL
    description = "Potential SQL injection vulnerability found. Use parameterized queries."
    recommendation = "Use parameterized queries or ORM with proper escaping"
    pattern = r"(SELECT|INSERT|UPDATE|DELETE).*\+.*['\"]\s*\+"
    metadata = {
        "category": "injection",
        "ciaImpact": "Integrity, Confidentiality",
        "owasp": "A03:2021 – Injection",
        "cwe": "CWE-89: SQL Injection",
    }


class XssVulnerabilityRule(Rule):
    id = "RULE-80-XSS"
    name = "XSS Vulnerability"
    severity = Severity.CRITICAL
    description = "Potential XSS vulnerability. Use proper output encoding."
    recommendation = (
        "Sanitize all inputs and use safe rendering methods (e.g., textContent, DOMPurify)"
    )
    pattern = r"dangerouslySetInnerHTML|innerHTML\s*=|document\.write\(|eval\("
    metadata = {
        "category": "injection",
        "ciaImpact": "Integrity, Confidentiality",
        "owasp": "A03:2021 – Injection",
        "cwe": "CWE-79: Cross-site Scripting (XSS)",
    }


class MissingAuthenticationRule(Rule):
    # Any self-closing <Route element=.../> counts; there is no check for an auth wrapper.
    id = "RULE-65"
    name = "Missing Authentication"
    severity = Severity.CRITICAL
    description = (
        "Route without authentication check. "
        "All routes handling user data must implement authentication."
    )
    recommendation = (
        "Implement authentication using Auth0, Firebase Auth, or Passport.js. "
        "Wrap routes with authentication middleware."
    )
    pattern = r"<Route.*element=.*/>"
    ignore_case = False
    metadata = {
        "category": "authentication",
        "ciaImpact": "Confidentiality, Integrity, Availability",
        "owasp": "A07:2021 – Identification and Authentication Failures",
        "cwe": "CWE-306: Missing Authentication for Critical Function",
    }

    def applies_to(self, file_path: str) -> bool:
        return file_path.endswith((".jsx", ".tsx"))


class CsrfProtectionRule(Rule):
    id = "RULE-80-CSRF"
    name = "Missing CSRF Protection"
    severity = Severity.HIGH
    description = "Form without CSRF protection detected."
    recommendation = "Implement CSRF tokens for all state-changing operations"
    pattern = r"<form[^>]*method=['\"]post['\"][^>]*>"
    metadata = {
        "category": "csrf",
        "ciaImpact": "Integrity",
        "owasp": "A01:2021 – Broken Access Control",
        "cwe": "CWE-352: Cross-Site Request Forgery (CSRF)",
    }

    def applies_to(self, file_path: str) -> bool:
        return file_path.endswith((".jsx", ".tsx", ".html"))


class InputValidationRule(Rule):
    id = "RULE-80-INPUT"
    name = "Missing Input Validation"
    severity = Severity.HIGH
    description = "User input used without validation."
    recommendation = (
        "Validate all user inputs using validation libraries (e.g., Joi, Yup, express-validator)"
    )
    pattern = r"req\.(body|query|params)\.\w+(?!.*validate)"
    metadata = {
        "category": "validation",
        "ciaImpact": "Integrity",
        "owasp": "A03:2021 – Injection",
        "cwe": "CWE-20: Improper Input Validation",
    }

    def applies_to(self, file_path: str) -> bool:
        return bool(JS_TS_FILE.search(file_path)) and ".test." not in file_path


class UnsafeCodeExecutionRule(Rule):
    id = "RULE-80-EVAL"
    name = "Unsafe Code Execution"
    severity = Severity.CRITICAL
    description = "Unsafe code execution pattern detected (eval, Function constructor)."
    recommendation = "Avoid eval() and Function constructor. Use safe alternatives like JSON.parse()"
    pattern = r"eval\(|Function\(|setTimeout\(['\"]"
    metadata = {
        "category": "code-execution",
        "ciaImpact": "Integrity, Availability",
        "owasp": "A03:2021 – Injection",
        "cwe": "CWE-95: Improper Neutralization of Directives in Dynamically Evaluated Code",
    }


class SecretExposureInLogsRule(Rule):
    id = "RULE-90-LOGS"
    name = "Potential Secret Exposure in Logs"
    severity = Severity.HIGH
    description = "Potential secret exposure in console logs."
    recommendation = "Never log sensitive data. Use structured logging with secret redaction."
    pattern = r"console\.(log|info|debug|warn)\(.*?(password|secret|token|key|credential)"
    metadata = {
        "category": "secrets",
        "ciaImpact": "Confidentiality",
        "owasp": "A02:2021 – Cryptographic Failures",
        "cwe": "CWE-532: Insertion of Sensitive Information into Log File",
    }


class InsecureRandomnessRule(Rule):
    id = "RULE-80-RANDOM"
    name = "Insecure Randomness"
    severity = Severity.MEDIUM
    description = "Math.random() is not cryptographically secure."
    recommendation = (
        "Use crypto.randomBytes() or crypto.getRandomValues() for security-sensitive operations"
    )
    pattern = r"Math\.random\(\)"
    metadata = {
        "category": "cryptography",
        "ciaImpact": "Confidentiality",
        "owasp": "A02:2021 – Cryptographic Failures",
        "cwe": "CWE-330: Use of Insufficiently Random Values",
    }


class MissingRateLimitingRule(Rule):
    id = "RULE-97-RATE"
    name = "Missing Rate Limiting"
    severity = Severity.HIGH
    description = "API endpoint without rate limiting."
    recommendation = "Implement rate limiting using express-rate-limit or similar middleware"
    pattern = r"app\.(post|put|delete)\(['\"]/(api|auth)"
    metadata = {
        "category": "availability",
        "ciaImpact": "Availability",
        "owasp": "A04:2021 – Insecure Design",
        "cwe": "CWE-770: Allocation of Resources Without Limits or Throttling",
    }

    def applies_to(self, file_path: str) -> bool:
        if not JS_TS_FILE.search(file_path):
            return False
        return "server" in file_path or "route" in file_path


class HttpsEnforcementRule(Rule):
    id = "RULE-97-HTTPS"
    name = "Missing HTTPS Enforcement"
    severity = Severity.HIGH
    description = "HTTP URL detected. HTTPS should be enforced."
    recommendation = "Use HTTPS for all communications. Implement HSTS headers."
    pattern = r"http://"
    metadata = {
        "category": "transport",
        "ciaImpact": "Confidentiality, Integrity",
        "owasp": "A02:2021 – Cryptographic Failures",
        "cwe": "CWE-319: Cleartext Transmission of Sensitive Information",
    }


class DebugStatementsRule(Rule):
    id = "RULE-60-DEBUG"
    name = "Debug Statements"
    severity = Severity.LOW
    description = "Debug statements found in production code."
    recommendation = "Remove debug statements or use proper logging framework with log levels"
    pattern = r"console\.(log|warn|error|info|debug)\("
    metadata = {
        "category": "code-quality",
        "ciaImpact": "Confidentiality",
        "owasp": "A05:2021 – Security Misconfiguration",
        "cwe": "CWE-489: Active Debug Code",
    }


BUILTIN_RULES: List[Type[Rule]] = [
    HardcodedSecretsRule,
    SqlInjectionRule,
    XssVulnerabilityRule,
    MissingAuthenticationRule,
    CsrfProtectionRule,
    InputValidationRule,
    UnsafeCodeExecutionRule,
    SecretExposureInLogsRule,
    InsecureRandomnessRule,
    MissingRateLimitingRule,
    HttpsEnforcementRule,
    DebugStatementsRule,
]
