"""
Static lookup tables used by tech-stack detection and scoring. All tables are read-only.
"""
from types import MappingProxyType
from typing import FrozenSet, Mapping

# Top-level file name -> ecosystem, goes to the `backend` bucket.
PACKAGE_FILES: Mapping[str, str] = MappingProxyType({
    "package.json": "Node.js",
    "requirements.txt": "Python",
    "Pipfile": "Python",
    "pyproject.toml": "Python",
    "setup.py": "Python",
    "Gemfile": "Ruby",
    "pom.xml": "Java",
    "build.gradle": "Java",
    "build.gradle.kts": "Kotlin",
    "Cargo.toml": "Rust",
    "go.mod": "Go",
    "composer.json": "PHP",
    "pubspec.yaml": "Dart/Flutter",
    "mix.exs": "Elixir",
})

# Top-level file name -> framework, goes to the `frameworks` bucket.
FRAMEWORK_FILES: Mapping[str, str] = MappingProxyType({
    "angular.json": "Angular",
    "nuxt.config.js": "Nuxt.js",
    "nuxt.config.ts": "Nuxt.js",
    "next.config.js": "Next.js",
    "next.config.mjs": "Next.js",
    "gatsby-config.js": "Gatsby",
    "vue.config.js": "Vue.js",
    "svelte.config.js": "Svelte",
    "astro.config.mjs": "Astro",
    "manage.py": "Django",
})

# Top-level file name -> tool, goes to the `tools` bucket.
TOOL_FILES: Mapping[str, str] = MappingProxyType({
    "Dockerfile": "Docker",
    "docker-compose.yml": "Docker Compose",
    "docker-compose.yaml": "Docker Compose",
    "webpack.config.js": "Webpack",
    "vite.config.js": "Vite",
    "vite.config.ts": "Vite",
    "tailwind.config.js": "Tailwind CSS",
    "postcss.config.js": "PostCSS",
    ".eslintrc": "ESLint",
    ".eslintrc.json": "ESLint",
    "tsconfig.json": "TypeScript",
    "Makefile": "Make",
})

# Manifest dependency name (lower-cased) -> technology, one table per bucket.
FRONTEND_DEPENDENCIES: Mapping[str, str] = MappingProxyType({
    "react": "React",
    "vue": "Vue.js",
    "@angular/core": "Angular",
    "svelte": "Svelte",
    "preact": "Preact",
    "solid-js": "SolidJS",
})

BACKEND_DEPENDENCIES: Mapping[str, str] = MappingProxyType({
    "express": "Express.js",
    "fastify": "Fastify",
    "koa": "Koa.js",
    "nestjs": "NestJS",
    "@nestjs/core": "NestJS",
    "django": "Django",
    "flask": "Flask",
    "fastapi": "FastAPI",
    "aiohttp": "aiohttp",
    "tornado": "Tornado",
})

DATABASE_DEPENDENCIES: Mapping[str, str] = MappingProxyType({
    "mongoose": "MongoDB",
    "mongodb": "MongoDB",
    "pymongo": "MongoDB",
    "mysql2": "MySQL",
    "pymysql": "MySQL",
    "pg": "PostgreSQL",
    "psycopg2": "PostgreSQL",
    "psycopg2-binary": "PostgreSQL",
    "asyncpg": "PostgreSQL",
    "sqlite3": "SQLite",
    "redis": "Redis",
    "sqlalchemy": "SQLAlchemy",
    "prisma": "Prisma",
})

TOOL_DEPENDENCIES: Mapping[str, str] = MappingProxyType({
    "typescript": "TypeScript",
    "webpack": "Webpack",
    "vite": "Vite",
    "tailwindcss": "Tailwind CSS",
    "eslint": "ESLint",
    "jest": "Jest",
    "pytest": "pytest",
})

DEPENDENCY_TABLES: Mapping[str, Mapping[str, str]] = MappingProxyType({
    "frontend": FRONTEND_DEPENDENCIES,
    "backend": BACKEND_DEPENDENCIES,
    "database": DATABASE_DEPENDENCIES,
    "tools": TOOL_DEPENDENCIES,
})

DEPLOYABLE_FRAMEWORKS: FrozenSet[str] = frozenset({
    "React", "Vue.js", "Angular", "Next.js", "Nuxt.js", "Gatsby",
})

CONTAINERIZATION_TOOLS: FrozenSet[str] = frozenset({"Docker", "Docker Compose"})

# GitHub primary language -> category label used when the stack says nothing.
LANGUAGE_CATEGORIES: Mapping[str, str] = MappingProxyType({
    "Python": "Python Project",
    "JavaScript": "JavaScript Project",
    "TypeScript": "TypeScript Project",
    "Go": "Go Project",
    "Rust": "Rust Project",
    "Java": "Java Project",
    "Ruby": "Ruby Project",
    "C": "C Project",
    "C++": "C++ Project",
    "Jupyter Notebook": "Data Science Project",
    "Shell": "Scripting Project",
})
