"""Shared pytest fixtures for the Lathe test suite.

Provides reusable fixtures for:
- A sample Spring/Maven skeleton as an in-memory ProjectTree
- The same skeleton written to a temporary directory
- Quiet logging for every test
"""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from lathe.logging_config import setup_logging
from lathe.tree import ProjectTree


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep loguru off the console during tests."""
    setup_logging(suppress_console=True, force=True)


# ---------------------------------------------------------------------------
# Skeleton contents
# ---------------------------------------------------------------------------

POM_XML = textwrap.dedent("""\
    <?xml version="1.0" encoding="UTF-8"?>
    <project xmlns="http://maven.apache.org/POM/4.0.0" xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" xsi:schemaLocation="http://maven.apache.org/POM/4.0.0 http://maven.apache.org/xsd/maven-4.0.0.xsd">
        <modelVersion>4.0.0</modelVersion>

        <parent>
            <groupId>org.springframework.boot</groupId>
            <artifactId>spring-boot-starter-parent</artifactId>
            <version>2.7.0</version>
        </parent>

        <!-- project coordinates -->
        <groupId>com.example</groupId>
        <artifactId>my-company-domain</artifactId>
        <version>0.0.1-SNAPSHOT</version>
        <name>my-company-domain</name>
        <description>Command side of the domain</description>

        <dependencies>
            <dependency>
                <groupId>org.axonframework</groupId>
                <artifactId>axon-spring-boot-starter</artifactId>
            </dependency>
        </dependencies>
    </project>
""")

APPLICATION_JAVA = textwrap.dedent("""\
    package com.example.skeleton;

    import org.springframework.boot.SpringApplication;
    import org.springframework.boot.autoconfigure.SpringBootApplication;

    /**
     * Entry point for SkeletonApplication.
     */
    @SpringBootApplication
    public class SkeletonApplication {

        public static void main(String[] args) {
            SpringApplication.run(SkeletonApplication.class, args);
        }
    }
""")

SERVICE_JAVA = textwrap.dedent("""\
    package com.example.skeleton;

    public class SkeletonService {
        private final String name = "SkeletonService";

        public String greet() {
            return "hello from " + name;
        }
    }
""")

CONTROLLER_JAVA = textwrap.dedent("""\
    package com.example.skeleton.web;

    import com.example.skeleton.SkeletonService;

    public class SkeletonController {
        private final SkeletonService service;

        public SkeletonController(SkeletonService service) {
            this.service = service;
        }
    }
""")

APPLICATION_TESTS_JAVA = textwrap.dedent("""\
    package com.example.skeleton;

    import org.junit.jupiter.api.Test;

    class SkeletonApplicationTests {
        @Test
        void contextLoads() {
        }
    }
""")

CHANGELOG_MD = textwrap.dedent("""\
    # Change Log

    All notable changes to this project will be documented in this file.

    ## [Unreleased]

    [Unreleased]: https://github.com/atomist-rugs/spring-rugs/compare/1.2.3...HEAD

    ## [1.2.3]

    - Things from the template history

    ## [0.1.0]

    ### Added

    -   Initial spring-rugs release
""")

CIRCLECI_YML = textwrap.dedent("""\
    version: 2
    jobs:
      build:
        steps:
          - run: docker build -t my-company-domain .
""")

SKELETON_FILES: dict[str, str] = {
    "pom.xml": POM_XML,
    "README.md": "# my-company-domain\n\nTemplate README.\n",
    "CHANGELOG.md": CHANGELOG_MD,
    "LICENSE": "Apache License 2.0\n",
    "CONTRIBUTING.md": "How to contribute\n",
    "CODE_OF_CONDUCT.md": "Be nice\n",
    ".travis.yml": "language: java\n",
    ".circleci/config.yml": CIRCLECI_YML,
    "src/main/java/com/example/skeleton/SkeletonApplication.java": APPLICATION_JAVA,
    "src/main/java/com/example/skeleton/SkeletonService.java": SERVICE_JAVA,
    "src/main/java/com/example/skeleton/web/SkeletonController.java": CONTROLLER_JAVA,
    "src/test/java/com/example/skeleton/SkeletonApplicationTests.java": APPLICATION_TESTS_JAVA,
}


# ---------------------------------------------------------------------------
# Trees
# ---------------------------------------------------------------------------

@pytest.fixture
def skeleton_files() -> dict[str, str]:
    return dict(SKELETON_FILES)


@pytest.fixture
def skeleton_tree(skeleton_files: dict[str, str]) -> ProjectTree:
    """The sample skeleton as an in-memory tree named my-service."""
    return ProjectTree("my-service", skeleton_files)


@pytest.fixture
def skeleton_dir(tmp_path: Path, skeleton_files: dict[str, str]) -> Path:
    """The sample skeleton written to disk, plus a .git dir and a binary file."""
    root = tmp_path / "my-service"
    for path, content in skeleton_files.items():
        full_path = root / path
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_text(content, encoding="utf-8")

    (root / ".git").mkdir()
    (root / ".git" / "HEAD").write_text("ref: refs/heads/main\n")
    (root / "mvnw.jar").write_bytes(b"PK\x03\x04\x00\x00binary")
    return root
