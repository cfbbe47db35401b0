#!/usr/bin/env python3
"""
Configuration Validator for the GitHub MCP Tool Bridge

This script validates your OAuth and server configuration without requiring
interactive input or contacting GitHub.
"""

import sys
from pathlib import Path
from urllib.parse import urlparse
from dotenv import load_dotenv

from src.core.config import get_settings, reset_settings
from src.tools.registry import build_manifest


def load_config():
    """Load configuration from .env file"""
    env_file = Path('.env')
    if env_file.exists():
        load_dotenv(env_file, override=False)
        print("✅ Loaded configuration from .env file")
    else:
        print("⚠️  No .env file found, using environment variables")

    reset_settings()
    s = get_settings()
    return {
        'client_id': s.github_client_id,
        'client_secret': s.github_client_secret,
        'base_url': s.base_url,
        'callback_url': s.callback_url,
        'port': s.port,
        'http_timeout': s.http_timeout_seconds,
        'sse_keepalive': s.sse_keepalive_seconds,
        'credential_ttl': s.credential_ttl_seconds,
    }


def validate_github_config(config):
    """Validate GitHub OAuth configuration"""
    print("\n🔍 Validating GitHub OAuth Configuration...")

    if not config['client_id']:
        print("❌ GITHUB_CLIENT_ID not set")
        return False

    if not config['client_secret']:
        print("❌ GITHUB_CLIENT_SECRET not set")
        return False

    print(f"✅ GitHub Client ID: {config['client_id'][:8]}...")
    print(f"✅ GitHub Client Secret: {'*' * 8}...")
    return True


def validate_server_config(config):
    """Validate the externally reachable address and server options"""
    print("\n🔍 Validating Server Configuration...")

    parsed = urlparse(config['base_url'])
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        print(f"❌ BASE_URL is not an http(s) URL: {config['base_url']!r}")
        return False

    print(f"✅ Base URL: {config['base_url']}")
    print(f"   Register this callback with GitHub: {config['callback_url']}")
    if parsed.hostname in ('localhost', '127.0.0.1'):
        print("⚠️  BASE_URL points at localhost; GitHub can only redirect a local browser there")
    print(f"✅ Port: {config['port']}")
    print(f"✅ HTTP timeout: {config['http_timeout']}s")
    if config['sse_keepalive'] > 0:
        print(f"✅ Discovery stream keep-alive every {config['sse_keepalive']}s")
    else:
        print("✅ Discovery stream closes after the manifest")
    if config['credential_ttl'] > 0:
        print(f"✅ Credentials expire after {config['credential_ttl']}s")
    else:
        print("⚠️  Credentials never expire (CREDENTIAL_TTL_SECONDS=0)")
    return True


def validate_tools():
    """Check the tool manifest builds"""
    print("\n🔍 Validating Tool Manifest...")
    try:
        tools = build_manifest()['tools']
    except Exception as e:
        print(f"❌ Tool manifest failed to build: {e}")
        return False
    print(f"✅ Tools advertised: {', '.join(tools)}")
    return True


def main():
    """Main validation function"""
    print("🔧 GitHub MCP Tool Bridge - Configuration Validator")
    print("=" * 70)

    config = load_config()

    github_valid = validate_github_config(config)
    server_valid = validate_server_config(config)
    tools_valid = validate_tools()

    # Summary
    print("\n📊 Validation Summary")
    print("=" * 30)
    print(f"GitHub OAuth: {'✅ Valid' if github_valid else '❌ Invalid'}")
    print(f"Server: {'✅ Valid' if server_valid else '❌ Invalid'}")
    print(f"Tools: {'✅ Valid' if tools_valid else '❌ Invalid'}")

    if github_valid and server_valid and tools_valid:
        print("\n🎉 All validations passed! The bridge is ready to start.")
        print("\nNext steps:")
        print("1. Start server: python mcp_server.py")
        print(f"2. Authorize: open {config['base_url']}/auth/github")
        print(f"3. Point your client at {config['base_url']}/sse")
        return True
    else:
        print("\n❌ Some validations failed. Please check the errors above.")
        return False


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
