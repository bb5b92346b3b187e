#!/usr/bin/env python3
"""Helper script to check and create the .env file for the billing backend."""

from pathlib import Path
import os


def mask(value):
    if len(value) > 20:
        return value[:20] + "..." + value[-10:]
    return value


def main():
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Billing Environment Variables Checker")
    print("=" * 60)
    print()

    if env_file.exists():
        print(f"✅ Found .env file at: {env_file}")
        print()
        print("Current contents:")
        print("-" * 60)
        with open(env_file, "r", encoding="utf-8") as f:
            for line in f.read().split("\n"):
                if "BILLING_SUPABASE_KEY" in line and "=" in line:
                    name, value = line.split("=", 1)
                    print(f"{name}={mask(value.strip())}")
                else:
                    print(line)
        print("-" * 60)
        print()
    else:
        print(f"❌ .env file NOT found at: {env_file}")
        print()
        print("Creating template .env file...")
        print()

        template = """# Supabase Configuration (leave empty to run on in-memory storage)
BILLING_SUPABASE_URL=https://your-project-id.supabase.co
BILLING_SUPABASE_KEY=your-service-role-key-here
BILLING_CUSTOMERS_TABLE=customers
BILLING_CHARGES_TABLE=charges

# API Configuration
BILLING_API_PREFIX=/api
BILLING_LOG_LEVEL=INFO
# BILLING_FRONTEND_ALLOWED_ORIGINS accepts a JSON array or a comma-separated list
# BILLING_FRONTEND_ALLOWED_ORIGINS=http://localhost:5173,http://127.0.0.1:5173

# Billing
BILLING_BILLING_TIMEZONE=America/Tegucigalpa
BILLING_INVOICE_PAGE_FORMAT=A4
"""

        with open(env_file, "w", encoding="utf-8") as f:
            f.write(template)

        print(f"✅ Created .env file at: {env_file}")
        print()
        print("⚠️  Edit .env and add your Supabase credentials, or remove them to use memory storage.")
        print()
        return

    print("Checking environment variables...")
    print()

    supabase_url = os.getenv("BILLING_SUPABASE_URL")
    supabase_key = os.getenv("BILLING_SUPABASE_KEY")

    if supabase_url:
        print(f"✅ BILLING_SUPABASE_URL (from environment): {supabase_url[:30]}...")
    else:
        print("❌ BILLING_SUPABASE_URL not found in environment")

    if supabase_key:
        print(f"✅ BILLING_SUPABASE_KEY (from environment): {supabase_key[:20]}...")
    else:
        print("❌ BILLING_SUPABASE_KEY not found in environment")

    print()
    print("Testing config loading...")
    print()

    try:
        import sys
        sys.path.insert(0, str(project_root / "src"))
        from courier_billing.config import settings

        print(f"Billing timezone: {settings.billing_timezone}")
        print(f"Invoice page format: {settings.invoice_page_format}")
        print()

        if settings.supabase_url and settings.supabase_key:
            print("=" * 60)
            print("✅ SUCCESS: Supabase is configured!")
            print("=" * 60)
        else:
            print("=" * 60)
            print("⚠️  Supabase is NOT configured, the API will use memory storage")
            print("=" * 60)
            print()
            print("Troubleshooting:")
            print("1. Make sure .env file exists in project root")
            print("2. Make sure variables start with BILLING_ prefix")
            print("3. Make sure there are no spaces around = sign")
            print("4. Restart backend after editing .env")
            print()
    except Exception as e:
        print(f"❌ Error loading config: {e}")
        print()
        print("Make sure you're running this from the project root directory")


if __name__ == "__main__":
    main()
