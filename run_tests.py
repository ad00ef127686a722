#!/usr/bin/env python3
"""
Test runner script for Uptime Worker.

Usage:
    python run_tests.py              # All tests with coverage
    python run_tests.py --quick      # Quick unit tests only
    python run_tests.py --html       # Generate HTML coverage report
    python run_tests.py --module probe  # Test specific module
"""

import sys
import subprocess


def run_command(cmd):
    """Execute command and return its exit code."""
    print(f"\nExecuting: {' '.join(cmd)}\n")
    return subprocess.run(cmd).returncode


def main():
    """Main test runner function."""
    args = sys.argv[1:]
    
    print("=" * 60)
    print("Uptime Worker Test Runner")
    print("=" * 60)
    
    if "--quick" in args:
        print("\nRunning quick unit tests...")
        return run_command(["pytest", "-m", "unit", "-q"])
    
    if "--html" in args:
        print("\nRunning tests with HTML coverage report...")
        code = run_command(["pytest", "--cov=uptime_worker", "--cov-report=html", "--cov-report=term", "-v"])
        if code == 0:
            print("\nHTML report generated: htmlcov/index.html")
        return code
    
    if "--module" in args:
        try:
            module = args[args.index("--module") + 1]
        except IndexError:
            print("Error: Specify module name after --module")
            print("Example: python run_tests.py --module probe")
            return 1
        print(f"\nRunning tests for module: {module}...")
        return run_command(["pytest", f"tests/test_{module}.py", "--cov=uptime_worker", "-v"])
    
    print("\nRunning all tests with coverage check...")
    code = run_command(["pytest", "--cov=uptime_worker", "--cov-report=term-missing", "-q"])
    
    print("\n" + "=" * 60)
    print("ALL TESTS PASSED" if code == 0 else "SOME TESTS FAILED")
    print("=" * 60)
    if code != 0:
        print("\nFor details: pytest --cov=uptime_worker -v --tb=short")
    
    return code


if __name__ == "__main__":
    sys.exit(main())
