#!/usr/bin/env python3
# scripts/utils/role_catalog.py
"""
Job Role Catalog
Predefined technology roles tracked by the dashboard, their categories and the
category-level factors used by the role-aware impact analysis.
"""
import logging
from typing import Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)


class RoleCatalog:
    """
    Lookup utilities for the predefined job roles.
    """

    def __init__(self):
        self.roles = [
            # Software Development
            {"id": "software-developer", "name": "Software Developer", "category": "software-development",
             "description": "Designs, develops, and maintains software applications and systems",
             "aliases": ["programmer", "software engineer", "developer", "coder"]},
            {"id": "frontend-developer", "name": "Frontend Developer", "category": "software-development",
             "description": "Specializes in user interface and user experience development",
             "aliases": ["ui developer", "web developer", "react developer", "vue developer"]},
            {"id": "backend-developer", "name": "Backend Developer", "category": "software-development",
             "description": "Focuses on server-side logic, databases, and system architecture",
             "aliases": ["server developer", "api developer", "backend engineer"]},
            {"id": "fullstack-developer", "name": "Full Stack Developer", "category": "software-development",
             "description": "Works on both frontend and backend development",
             "aliases": ["full-stack engineer", "fullstack engineer", "web developer"]},

            # AI/ML
            {"id": "ai-engineer", "name": "AI Engineer", "category": "ai-ml",
             "description": "Develops and implements artificial intelligence and machine learning solutions",
             "aliases": ["machine learning engineer", "ml engineer", "ai developer", "ai specialist"]},
            {"id": "data-scientist", "name": "Data Scientist", "category": "data-science",
             "description": "Analyzes complex data to extract insights and build predictive models",
             "aliases": ["data analyst", "research scientist", "analytics specialist"]},
            {"id": "ml-researcher", "name": "ML Researcher", "category": "ai-ml",
             "description": "Conducts research in machine learning algorithms and methodologies",
             "aliases": ["research scientist", "ai researcher", "machine learning researcher"]},

            # Data Science
            {"id": "data-analyst", "name": "Data Analyst", "category": "data-science",
             "description": "Interprets data and creates reports to support business decisions",
             "aliases": ["business analyst", "analytics specialist", "data specialist"]},
            {"id": "data-engineer", "name": "Data Engineer", "category": "data-science",
             "description": "Builds and maintains data pipelines and infrastructure",
             "aliases": ["big data engineer", "etl developer", "data pipeline engineer"]},

            # DevOps
            {"id": "devops-engineer", "name": "DevOps Engineer", "category": "devops",
             "description": "Manages deployment pipelines, infrastructure, and system reliability",
             "aliases": ["site reliability engineer", "platform engineer", "cloud engineer"]},
            {"id": "cloud-architect", "name": "Cloud Architect", "category": "devops",
             "description": "Designs and oversees cloud infrastructure and migration strategies",
             "aliases": ["solutions architect", "infrastructure architect", "aws architect"]},

            # Testing
            {"id": "manual-tester", "name": "Manual Tester", "category": "testing",
             "description": "Performs manual testing of software applications and systems",
             "aliases": ["qa tester", "quality assurance", "software tester", "test analyst"]},
            {"id": "automation-engineer", "name": "Automation Engineer", "category": "testing",
             "description": "Develops and maintains automated testing frameworks and scripts",
             "aliases": ["test automation engineer", "qa automation", "sdet"]},

            # Design
            {"id": "ux-designer", "name": "UX Designer", "category": "design",
             "description": "Designs user experiences and interfaces for digital products",
             "aliases": ["user experience designer", "product designer", "interaction designer"]},
            {"id": "ui-designer", "name": "UI Designer", "category": "design",
             "description": "Creates visual designs and user interfaces for applications",
             "aliases": ["visual designer", "interface designer", "graphic designer"]},

            # Management
            {"id": "product-manager", "name": "Product Manager", "category": "management",
             "description": "Manages product strategy, roadmap, and feature development",
             "aliases": ["product owner", "pm", "product lead"]},
            {"id": "engineering-manager", "name": "Engineering Manager", "category": "management",
             "description": "Leads engineering teams and manages technical projects",
             "aliases": ["tech lead", "development manager", "team lead"]},

            # Support
            {"id": "support-engineer", "name": "Support Engineer", "category": "support",
             "description": "Provides technical support and troubleshooting for software products",
             "aliases": ["technical support", "customer support", "help desk", "support specialist"]},
            {"id": "technical-writer", "name": "Technical Writer", "category": "support",
             "description": "Creates documentation, guides, and technical content",
             "aliases": ["documentation specialist", "content writer", "docs writer"]},
        ]
        self._by_id = {role["id"]: role for role in self.roles}

        self.categories = {
            "software-development": "Software Development",
            "ai-ml": "AI & Machine Learning",
            "data-science": "Data Science",
            "devops": "DevOps & Infrastructure",
            "testing": "Quality Assurance",
            "design": "Design & UX",
            "management": "Management & Leadership",
            "support": "Support & Documentation",
        }

        self.risk_levels = {
            "high": {"label": "High Disruption Risk",
                     "description": "Roles at high risk of automation or significant change"},
            "medium": {"label": "Transition Role",
                       "description": "Roles undergoing transformation but with adaptation opportunities"},
            "low": {"label": "Growth Opportunity",
                    "description": "Roles with strong growth potential and low automation risk"},
        }

        self.classifications = {
            "disruption": {"label": "Disruption",
                           "description": "High AI impact with declining job demand"},
            "transition": {"label": "Transition",
                           "description": "Moderate changes requiring skill adaptation"},
            "growth": {"label": "Growth",
                       "description": "Expanding opportunities with AI complementarity"},
        }

        # How each category relates to AI capabilities (all factors 0-1)
        self.category_factors = {
            "ai-ml": {"skill_overlap": 0.9, "automation_risk": 0.2, "complementarity": 0.8, "market_volatility": 0.4},
            "software-development": {"skill_overlap": 0.6, "automation_risk": 0.4, "complementarity": 0.7, "market_volatility": 0.3},
            "data-science": {"skill_overlap": 0.8, "automation_risk": 0.3, "complementarity": 0.8, "market_volatility": 0.3},
            "testing": {"skill_overlap": 0.4, "automation_risk": 0.8, "complementarity": 0.3, "market_volatility": 0.5},
            "design": {"skill_overlap": 0.3, "automation_risk": 0.4, "complementarity": 0.6, "market_volatility": 0.4},
            "management": {"skill_overlap": 0.2, "automation_risk": 0.2, "complementarity": 0.7, "market_volatility": 0.2},
            "support": {"skill_overlap": 0.3, "automation_risk": 0.7, "complementarity": 0.4, "market_volatility": 0.4},
            "devops": {"skill_overlap": 0.5, "automation_risk": 0.5, "complementarity": 0.6, "market_volatility": 0.3},
        }
        self.default_factors = {"skill_overlap": 0.5, "automation_risk": 0.5, "complementarity": 0.5, "market_volatility": 0.4}

    def get_role(self, role_id: str) -> Optional[Dict]:
        return self._by_id.get(role_id)

    def role_name(self, role_id: str) -> str:
        """Display name for a role id, falling back to the id itself."""
        role = self.get_role(role_id)
        return role["name"] if role else role_id

    def find_role(self, query: str) -> Optional[Dict]:
        """
        Find a role by id, name or alias (case-insensitive).

        Args:
            query: free-text role name as it appears in job postings

        Returns:
            Role dict or None if nothing matches
        """
        if not query:
            return None

        needle = str(query).strip().lower()
        if needle in self._by_id:
            return self._by_id[needle]

        for role in self.roles:
            if role["name"].lower() == needle:
                return role

        for role in self.roles:
            if needle in role["aliases"]:
                return role

        logger.debug(f"No catalog role matches '{query}'")
        return None

    def roles_in_categories(self, categories: Iterable[str]) -> List[Dict]:
        wanted = {str(getattr(c, "value", c)) for c in categories}
        return [role for role in self.roles if role["category"] in wanted]

    def get_role_factors(self, role_id: str) -> Dict[str, float]:
        role = self.get_role(role_id)
        if not role:
            return dict(self.default_factors)
        return dict(self.category_factors.get(role["category"], self.default_factors))
