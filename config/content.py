"""Built-in kiosk content: ERP training modules, Drivestream topics, university backgrounds.

Plain dicts in the same shape as the catalog JSON accepted by
``catalog.load_catalog``.
"""

SYNTHESIA_VIDEO_ID = "dd552b45-bf27-48c4-96a6-77a2d59e63e7"

ORGANIZATION_NAME = "Drivestream"
HOME_TOPIC = "home"
DEFAULT_BACKGROUND_IMAGE = "/assets/default-image.jpg"

MODULES = [
    {
        "key": "module 1",
        "title": "ERP Module 1: Finance and Accounting",
        "summary": (
            "ERP Module 1 covers Finance and Accounting: recording transactions, "
            "summarizing them, and reporting via financial statements."
        ),
        "media": {
            "kind": "synthesia",
            "url": f"https://share.synthesia.io/embeds/videos/{SYNTHESIA_VIDEO_ID}?autoplay=1&mute=1",
        },
        "synonyms": [
            "module 1", "mod 1", "m1", "one", "1", "finance", "financial", "accounting",
            "accounts", "ledger", "bookkeeping", "finance & accounting", "finance and accounting",
            "financial accounting", "f&a", "fa",
        ],
    },
    {
        "key": "module 2",
        "title": "ERP Module 2: Human Resources",
        "summary": (
            "ERP Module 2 covers Human Resources: hiring, onboarding, payroll, "
            "performance, and the overall employee lifecycle."
        ),
        "media": {
            "kind": "youtube",
            "url": "https://www.youtube.com/watch?v=I2oQuBRNiHs",
            "video_id": "I2oQuBRNiHs",
        },
        "synonyms": [
            "module 2", "mod 2", "m2", "two", "2", "human resources", "human resource", "hr",
            "people", "talent", "recruitment", "onboarding", "payroll",
        ],
    },
]

_SITE = "https://www.drivestream.com"

TOPICS = [
    {"key": "home", "keys": ["drivestream", "website", "home"],
     "summary": "Drivestream delivers Oracle Cloud consulting and enterprise transformation.",
     "url": "http://www.drivestream.com/"},
    {"key": "about", "keys": ["about", "company", "the company"],
     "summary": "Learn about Drivestream's mission, leadership and story.",
     "url": f"{_SITE}/the-company/"},
    {"key": "partners", "keys": ["partners", "partnerships"],
     "summary": "Explore Drivestream's partner ecosystem.",
     "url": f"{_SITE}/partners/"},
    {"key": "team", "keys": ["team", "meet the team", "leadership"],
     "summary": "Meet the Drivestream leadership and team.",
     "url": f"{_SITE}/meet-the-team/"},
    {"key": "consulting", "keys": ["consulting", "oracle cloud consulting"],
     "summary": "Consulting services for Oracle Cloud across ERP and HCM.",
     "url": f"{_SITE}/oracle-cloud-consulting/"},
    {"key": "subscription", "keys": ["subscription", "services subscription"],
     "summary": "Oracle Cloud Services Subscription options and bundles.",
     "url": f"{_SITE}/oracle-cloud-services-subscription/"},
    {"key": "erp", "keys": ["erp", "oracle cloud erp"],
     "summary": "Oracle Cloud ERP implementations and best practices.",
     "url": f"{_SITE}/oracle-cloud-erp/"},
    {"key": "hcm", "keys": ["hcm", "human capital management", "oracle cloud hcm"],
     "summary": "Oracle Cloud HCM solutions for the full employee lifecycle.",
     "url": f"{_SITE}/oracle-cloud-hcm/"},
    {"key": "payroll", "keys": ["payroll"],
     "summary": "Payroll with Oracle Cloud HCM.",
     "url": f"{_SITE}/oracle-cloud-hcm-payroll/"},
    {"key": "advisory", "keys": ["strategy", "advisory", "strategy and advisory"],
     "summary": "Strategy & Advisory for your cloud journey.",
     "url": f"{_SITE}/strategy-and-advisory/"},
    {"key": "ams", "keys": ["ams", "managed services", "application management"],
     "summary": "Application Managed Services (AMS) for Oracle Cloud.",
     "url": f"{_SITE}/ams/"},
    {"key": "industries", "keys": ["industries", "verticals"],
     "summary": (
         "Industries served: financial services, professional services, retail, "
         "high tech, utilities, healthcare, manufacturing."
     ),
     "url": f"{_SITE}/industries/"},
    {"key": "customers", "keys": ["customers", "clients", "case studies"],
     "summary": "Customer stories and outcomes.",
     "url": f"{_SITE}/customers/"},
    {"key": "finserv", "keys": ["financial services"],
     "summary": "Oracle Cloud solutions for Financial Services.",
     "url": f"{_SITE}/financial-services/"},
    {"key": "profserv", "keys": ["professional services"],
     "summary": "Oracle Cloud solutions for Professional Services.",
     "url": f"{_SITE}/professional-services/"},
    {"key": "retail", "keys": ["retail"],
     "summary": "Oracle Cloud for Retail.", "url": f"{_SITE}/retail/"},
    {"key": "hightech", "keys": ["high tech", "high-tech"],
     "summary": "Oracle Cloud for High Tech.", "url": f"{_SITE}/high-tech/"},
    {"key": "utilities", "keys": ["utilities"],
     "summary": "Oracle Cloud for Utilities.", "url": f"{_SITE}/utilities/"},
    {"key": "healthcare", "keys": ["healthcare"],
     "summary": "Oracle Cloud for Healthcare.", "url": f"{_SITE}/healthcare/"},
    {"key": "manufacturing", "keys": ["manufacturing"],
     "summary": "Oracle Cloud for Manufacturing.", "url": f"{_SITE}/manufacturing/"},
]

BACKGROUNDS = [
    {"key": "STANFORD", "label": "Stanford", "keys": ["stanford", "stanford university"],
     "image": "/assets/stanford-university-title.jpg"},
    {"key": "HARVARD", "label": "Harvard", "keys": ["harvard", "harvard university"],
     "image": "/assets/harvard-university-title.jpg"},
    {"key": "OXFORD", "label": "Oxford", "keys": ["oxford", "oxford university", "university of oxford"],
     "image": "/assets/oxford-university-title.jpg"},
]
