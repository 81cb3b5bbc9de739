"""
HTML pages: platform landing, unknown shop, and the shop storefront.

Pages are fixed markup rendered with Jinja2 autoescaping, so shop names,
product fields and SEO text always land in the document as text.
"""

import re
from typing import Any, Dict, Optional

from jinja2 import Environment

from schemas import (
    DEFAULT_FONT_FAMILY,
    DEFAULT_PRIMARY_COLOR,
    DEFAULT_SECONDARY_COLOR,
)

_env = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)

# Values copied into <style>/<script> must not be able to close the block
# or the string they sit in.
_CSS_VALUE = re.compile(r"^[#\w\s,.()%-]{1,64}$")

DEFAULT_PRODUCT_DESCRIPTION = "Quality product"
SAMPLE_TENANTS = ("nike", "adidas", "test")


def css_value(value: Optional[str], fallback: str) -> str:
    if isinstance(value, str) and _CSS_VALUE.match(value):
        return value
    return fallback


def format_price(price: Any) -> str:
    try:
        amount = float(price)
    except (TypeError, ValueError):
        return str(price)
    if amount.is_integer():
        return str(int(amount))
    return f"{amount:.2f}"


def image_src(url: Any) -> str:
    """Keep http(s) and relative image URLs, drop anything else."""
    if not isinstance(url, str) or not url:
        return ""
    scheme = url.split(":", 1)[0].lower() if ":" in url.split("/", 1)[0] else ""
    if scheme in ("", "http", "https"):
        return url
    return ""


_env.filters["price"] = format_price
_env.filters["image_src"] = image_src


_LANDING_TMPL = _env.from_string("""<!DOCTYPE html>
<html>
<head>
  <title>AivenaPilot - Multi-Tenant Shops</title>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <script src="https://cdn.tailwindcss.com"></script>
</head>
<body class="bg-gray-50">
  <div class="min-h-screen flex items-center justify-center">
    <div class="text-center">
      <h1 class="text-4xl font-bold text-gray-900 mb-4">🚀 AivenaPilot</h1>
      <p class="text-gray-600 mb-8">Multi-Tenant Shop Platform</p>
      <div class="bg-white p-6 rounded-lg shadow">
        <h3 class="text-lg font-semibold mb-4">Test Subdomains:</h3>
        <ul class="space-y-2 text-sm">
        {% for tenant in tenants %}
          <li><a href="http://{{ tenant }}.localhost:{{ port }}" class="text-blue-600 hover:underline">{{ tenant }}.localhost:{{ port }}</a></li>
        {% endfor %}
        </ul>
      </div>
    </div>
  </div>
</body>
</html>
""")

_NOT_FOUND_TMPL = _env.from_string("""<!DOCTYPE html>
<html>
<head>
  <title>Shop not found</title>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <script src="https://cdn.tailwindcss.com"></script>
</head>
<body class="bg-gray-50">
  <div class="min-h-screen flex items-center justify-center">
    <div class="text-center">
      <h1 class="text-2xl font-bold text-gray-900 mb-4">🛍️ Shop "{{ slug }}" not found</h1>
      <p class="text-gray-600 mb-8">This shop does not exist yet.</p>
      <a href="{{ dashboard_url }}" class="bg-blue-500 text-white px-6 py-3 rounded-lg hover:bg-blue-600">
        Create this shop
      </a>
    </div>
  </div>
</body>
</html>
""")

_SHOP_TMPL = _env.from_string("""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{{ seo_title }}</title>
  <meta name="description" content="{{ seo_description }}">
  <meta name="keywords" content="{{ seo_keywords }}">
  <script src="https://cdn.tailwindcss.com"></script>
  <script>
    tailwind.config = {
      theme: {
        extend: {
          colors: {
            primary: '{{ primary }}',
            secondary: '{{ secondary }}'
          },
          fontFamily: {
            sans: ['{{ font }}', 'sans-serif']
          }
        }
      }
    }
  </script>
  <style>
    .hero-gradient {
      background: linear-gradient(135deg, {{ primary }}, {{ secondary }});
    }
  </style>
</head>
<body class="font-sans">
  <nav class="bg-white shadow-sm border-b">
    <div class="max-w-7xl mx-auto px-4 sm:px-6 lg:px-8">
      <div class="flex justify-between items-center h-16">
        <div class="flex items-center space-x-3">
          <div class="w-8 h-8 rounded-full bg-primary text-white flex items-center justify-center font-bold">{{ initial }}</div>
          <span class="text-xl font-bold text-gray-900">{{ name }}</span>
        </div>
        <div class="hidden md:flex space-x-8">
          <a href="#home" class="text-gray-700 hover:text-primary transition-colors">Home</a>
          <a href="#products" class="text-gray-700 hover:text-primary transition-colors">Products</a>
          <a href="#contact" class="text-gray-700 hover:text-primary transition-colors">Contact</a>
        </div>
        <div class="flex items-center space-x-4">
          <button class="p-2 text-gray-400 hover:text-gray-600">🔍</button>
          <button class="p-2 text-gray-400 hover:text-gray-600">👤</button>
          <button class="relative p-2 text-gray-400 hover:text-gray-600">
            🛒
            <span class="absolute -top-1 -right-1 bg-primary text-white text-xs rounded-full w-5 h-5 flex items-center justify-center">0</span>
          </button>
        </div>
      </div>
    </div>
  </nav>

  <section id="home" class="hero-gradient text-white">
    <div class="max-w-7xl mx-auto px-4 sm:px-6 lg:px-8 py-24">
      <div class="text-center">
        <h1 class="text-4xl md:text-6xl font-bold mb-6">Welcome to {{ name }}</h1>
        <p class="text-xl md:text-2xl mb-8 opacity-90">Discover our outstanding products</p>
        <a href="#products" class="inline-block bg-white text-primary px-8 py-3 rounded-lg font-semibold text-lg hover:bg-gray-100 transition-colors">
          Browse the collection
        </a>
      </div>
    </div>
  </section>

  <section id="products" class="py-16 bg-white">
    <div class="max-w-7xl mx-auto px-4 sm:px-6 lg:px-8">
      <div class="text-center mb-12">
        <h2 class="text-3xl md:text-4xl font-bold text-gray-900 mb-4">Our Products</h2>
        <p class="text-lg text-gray-600 max-w-2xl mx-auto">A careful selection of quality products</p>
      </div>
{% if products %}
      <div class="grid grid-cols-1 md:grid-cols-2 lg:grid-cols-3 gap-8">
{% for product in products %}
        <div class="product-card bg-white border border-gray-200 rounded-lg overflow-hidden hover:shadow-lg transition-shadow">
          <div class="aspect-square bg-gray-100 flex items-center justify-center">
{% if product.imageUrl | image_src %}
            <img src="{{ product.imageUrl | image_src }}" alt="{{ product.name }}" class="w-full h-full object-cover">
{% else %}
            <span class="text-4xl">📦</span>
{% endif %}
          </div>
          <div class="p-6">
            <h3 class="text-lg font-semibold text-gray-900 mb-2">{{ product.name }}</h3>
            <p class="text-gray-600 text-sm mb-4">{{ product.description or default_description }}</p>
            <div class="flex justify-between items-center">
              <span class="text-2xl font-bold text-primary">{{ product.price | price }}€</span>
              <button class="bg-primary text-white px-4 py-2 rounded-lg hover:bg-primary/90 transition-colors">Add to cart</button>
            </div>
          </div>
        </div>
{% endfor %}
      </div>
{% else %}
      <div class="text-center py-12">
        <div class="text-6xl mb-4">🛍️</div>
        <p class="text-xl text-gray-500 mb-8">Products coming soon!</p>
        <div class="bg-secondary rounded-lg p-8 max-w-md mx-auto">
          <p class="text-gray-600">This shop is still being set up.</p>
        </div>
      </div>
{% endif %}
    </div>
  </section>

  <footer id="contact" class="bg-gray-900 text-white py-12">
    <div class="max-w-7xl mx-auto px-4 sm:px-6 lg:px-8">
      <div class="text-center">
        <div class="flex items-center justify-center space-x-3 mb-4">
          <div class="w-8 h-8 rounded-full bg-primary text-white flex items-center justify-center font-bold">{{ initial }}</div>
          <span class="text-xl font-bold">{{ name }}</span>
        </div>
        <p class="text-gray-400 mb-6">Online shop powered by AivenaPilot</p>
        <div class="border-t border-gray-800 pt-6">
          <p class="text-sm text-gray-500">© {{ name }}. All rights reserved.</p>
        </div>
      </div>
    </div>
  </footer>

  <script>
    document.querySelectorAll('a[href^="#"]').forEach(anchor => {
      anchor.addEventListener('click', function (e) {
        e.preventDefault();
        const target = document.querySelector(this.getAttribute('href'));
        target.scrollIntoView({ behavior: 'smooth' });
      });
    });
  </script>
</body>
</html>
""")


def render_landing(port: int) -> str:
    return _LANDING_TMPL.render(tenants=SAMPLE_TENANTS, port=port)


def render_not_found(slug: str, dashboard_url: str) -> str:
    return _NOT_FOUND_TMPL.render(slug=slug, dashboard_url=dashboard_url)


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def render_shop(shop: Dict[str, Any]) -> str:
    """Storefront for one shop record (as stored, camelCase keys)."""
    name = str(shop.get("name") or "")
    config = _mapping(shop.get("config"))
    theme = _mapping(config.get("theme"))
    seo = _mapping(config.get("seo"))
    products = [p for p in (shop.get("products") or []) if isinstance(p, dict)]

    return _SHOP_TMPL.render(
        name=name,
        initial=name[:1].upper(),
        seo_title=seo.get("title") or name,
        seo_description=seo.get("description") or f"Shop {name}",
        seo_keywords=seo.get("keywords") or name,
        primary=css_value(theme.get("primaryColor"), DEFAULT_PRIMARY_COLOR),
        secondary=css_value(theme.get("secondaryColor"), DEFAULT_SECONDARY_COLOR),
        font=css_value(theme.get("fontFamily"), DEFAULT_FONT_FAMILY),
        products=products,
        default_description=DEFAULT_PRODUCT_DESCRIPTION,
    )
