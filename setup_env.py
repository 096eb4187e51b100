#!/usr/bin/env python3
"""
Simple script to set up the .env file with proper formatting
"""

import os

ENV_TEMPLATE = """OPENAI_API_KEY=your_openai_api_key_here
ANALYSIS_MODEL=gpt-4o-mini
VISUALIZATION_MODEL=gpt-image-1
ENABLE_VISUALIZATION=on
"""


def create_env_file(env_path=".env"):
    """Create a properly formatted .env file with placeholder values"""
    if os.path.exists(env_path):
        print(f"⚠️ {os.path.abspath(env_path)} already exists - not overwriting it.")
        return False

    try:
        with open(env_path, 'w') as f:
            f.write(ENV_TEMPLATE)

        print("✅ Successfully created .env file template!")
        print("📁 Location:", os.path.abspath(env_path))
        print("\n📋 Template created with placeholder values:")
        print(ENV_TEMPLATE.strip())

        print("\n⚠️ IMPORTANT: Replace the placeholder API key with your actual key!")
        print("🔑 Get your API key from:")
        print("   • OpenAI: https://platform.openai.com/api-keys")

        return True

    except OSError as e:
        print(f"❌ Error creating .env file: {e}")
        return False


if __name__ == "__main__":
    create_env_file()
