"""Static consulting knowledge: industry use cases and pain-point solutions.

Dict/list ordering is significant: signal extraction reports matches in
the order they appear here.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class UseCase:
    use_case: str
    benefit: str


@dataclass(frozen=True)
class PainPointSolution:
    pain_point: str
    ai_solution: str
    impact: str
    # Suggestive follow-up asked once the pain point is known
    question: str


INDUSTRY_USE_CASES: dict[str, list[UseCase]] = {
    "healthcare": [
        UseCase("Medical image analysis for faster diagnostics", "Reduce diagnosis time by 60%"),
        UseCase("Patient triage automation", "Improve ER wait times"),
        UseCase("Drug discovery acceleration", "Cut R&D costs by 30%"),
        UseCase("Predictive health monitoring", "Early intervention"),
    ],
    "finance": [
        UseCase("Fraud detection in real-time", "Prevent 95% of fraudulent transactions"),
        UseCase("Algorithmic trading", "Optimize investment returns"),
        UseCase("Credit risk assessment", "Faster loan approvals"),
        UseCase("Customer service automation", "24/7 support coverage"),
    ],
    "retail": [
        UseCase("Demand forecasting", "Reduce inventory waste by 25%"),
        UseCase("Personalized recommendations", "Increase sales by 15%"),
        UseCase("Visual search capabilities", "Enhanced shopping experience"),
        UseCase("Dynamic pricing optimization", "Maximize revenue"),
    ],
    "manufacturing": [
        UseCase("Predictive maintenance", "Reduce downtime by 40%"),
        UseCase("Quality control automation", "99.9% defect detection"),
        UseCase("Supply chain optimization", "Lower logistics costs"),
        UseCase("Production scheduling AI", "Maximize throughput"),
    ],
    "real estate": [
        UseCase("Property valuation models", "Accurate pricing in seconds"),
        UseCase("Lead scoring automation", "Focus on hot prospects"),
        UseCase("Document processing", "Automate contract review"),
    ],
    "legal": [
        UseCase("Contract analysis", "Review 10x faster"),
        UseCase("Legal research automation", "Find relevant cases instantly"),
        UseCase("Document generation", "Draft standard agreements"),
    ],
    "marketing": [
        UseCase("Content generation", "Scale content production"),
        UseCase("Audience segmentation", "Hyper-targeted campaigns"),
        UseCase("A/B test optimization", "Maximize conversion rates"),
    ],
    "hr": [
        UseCase("Resume screening", "Find best candidates faster"),
        UseCase("Employee sentiment analysis", "Improve retention"),
        UseCase("Interview scheduling", "Reduce coordination time"),
    ],
    "education": [
        UseCase("Personalized learning paths", "Improve student outcomes"),
        UseCase("Automated grading", "Save teacher time"),
        UseCase("Student engagement analytics", "Identify at-risk students"),
    ],
    "logistics": [
        UseCase("Route optimization", "Reduce fuel costs by 20%"),
        UseCase("Delivery time prediction", "Improve customer satisfaction"),
        UseCase("Warehouse automation", "Faster fulfillment"),
    ],
}

GENERIC_USE_CASES: list[UseCase] = [
    UseCase("Process automation", "Save 10+ hours per week"),
    UseCase("Data analysis & insights", "Make data-driven decisions"),
    UseCase("Customer service automation", "24/7 instant responses"),
    UseCase("Content generation", "Scale marketing efforts"),
]

PAIN_POINT_SOLUTIONS: list[PainPointSolution] = [
    PainPointSolution(
        pain_point="manual data entry",
        ai_solution="Intelligent document processing with OCR and NLP",
        impact="Reduce processing time by 80%",
        question="Which documents or forms eat up most of your team's data entry time?",
    ),
    PainPointSolution(
        pain_point="slow customer support",
        ai_solution="AI chatbots with human handoff",
        impact="Instant responses, 24/7 availability",
        question="What kinds of customer questions come up over and over?",
    ),
    PainPointSolution(
        pain_point="forecasting errors",
        ai_solution="ML-based demand prediction",
        impact="25-40% improvement in accuracy",
        question="What data do you use today when you build your forecasts?",
    ),
    PainPointSolution(
        pain_point="high employee turnover",
        ai_solution="Predictive attrition modeling",
        impact="Proactive retention strategies",
        question="Do you see turnover concentrated in particular roles or teams?",
    ),
    PainPointSolution(
        pain_point="compliance monitoring",
        ai_solution="Automated regulatory scanning",
        impact="Real-time compliance alerts",
        question="Which regulations take the most effort to keep up with?",
    ),
    PainPointSolution(
        pain_point="inventory management",
        ai_solution="AI-powered stock optimization",
        impact="Reduce carrying costs by 30%",
        question="Are stockouts or overstock the bigger headache for you?",
    ),
]

KNOWN_TOOLS: list[str] = [
    "Excel",
    "Salesforce",
    "HubSpot",
    "Slack",
    "Teams",
    "SAP",
    "Oracle",
    "QuickBooks",
    "Shopify",
    "WordPress",
]

GOAL_KEYWORDS: list[str] = [
    "improve",
    "increase",
    "reduce",
    "save",
    "grow",
    "scale",
    "optimize",
    "automate",
    "streamline",
]
