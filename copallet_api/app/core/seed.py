"""
Demo data loaded into a fresh store on startup.

All seeded accounts share the password from ``settings.seed_password``
(``admin123`` by default):

* ``admin@copallet.com`` (admin)
* ``shipper@example.com`` and ``logistics@company.com`` (shippers)
* ``carrier@example.com`` and ``fleet@transport.com`` (carriers)
* ``driver@freight.com`` (carrier, verification pending)

Shipment windows are relative to the moment of seeding so the open
shipments always lie in the future.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict

from ..schemas.shipment import ShipmentCreate
from ..services.shipment_service import insert_shipment
from ..services.user_service import insert_user
from .config import settings
from .db import get_cursor, to_json, utcnow
from .security import hash_password


logger = logging.getLogger(__name__)

STANDARD_PALLET = {"length": 120, "width": 80, "height": 144}

USERS = [
    ("admin", "admin@copallet.com", "admin", "approved",
     {"first_name": "Admin", "last_name": "User", "company_name": "CoPallet"}),
    ("shipper", "shipper@example.com", "shipper", "approved",
     {"first_name": "John", "last_name": "Shipper", "company_name": "ABC Logistics", "phone": "+1234567890"}),
    ("carrier", "carrier@example.com", "carrier", "approved",
     {"first_name": "Mike", "last_name": "Driver", "company_name": "Fast Transport", "phone": "+0987654321"}),
    ("shipper2", "logistics@company.com", "shipper", "approved",
     {"first_name": "Sarah", "last_name": "Johnson", "company_name": "Global Logistics Ltd",
      "phone": "+31612345678"}),
    ("carrier2", "fleet@transport.com", "carrier", "approved",
     {"first_name": "Carlos", "last_name": "Rodriguez", "company_name": "Euro Transport Solutions",
      "phone": "+31687654321"}),
    ("carrier3", "driver@freight.com", "carrier", "pending",
     {"first_name": "Anna", "last_name": "Schmidt", "company_name": "Schmidt Logistics", "phone": "+49123456789"}),
]

ADDRESSES = {
    "amsterdam": {"street": "123 Main St", "city": "Amsterdam", "postal_code": "1012 AB",
                  "country": "Netherlands", "latitude": 52.3676, "longitude": 4.9041},
    "rotterdam": {"street": "456 Business Ave", "city": "Rotterdam", "postal_code": "3011 AA",
                  "country": "Netherlands", "latitude": 51.9244, "longitude": 4.4777},
    "utrecht": {"street": "789 Industrial Blvd", "city": "Utrecht", "postal_code": "3511 AB",
                "country": "Netherlands", "latitude": 52.0907, "longitude": 5.1214},
    "eindhoven": {"street": "321 Warehouse St", "city": "Eindhoven", "postal_code": "5611 AA",
                  "country": "Netherlands", "latitude": 51.4416, "longitude": 5.4697},
    "hamburg": {"street": "555 Port Road", "city": "Hamburg", "postal_code": "20095",
                "country": "Germany", "latitude": 53.5511, "longitude": 9.9937},
    "berlin": {"street": "888 Distribution Center", "city": "Berlin", "postal_code": "10115",
               "country": "Germany", "latitude": 52.5200, "longitude": 13.4050},
    "antwerp": {"street": "100 Factory Lane", "city": "Antwerp", "postal_code": "2000",
                "country": "Belgium", "latitude": 51.2194, "longitude": 4.4025},
    "brussels": {"street": "200 Retail Park", "city": "Brussels", "postal_code": "1000",
                 "country": "Belgium", "latitude": 50.8503, "longitude": 4.3517},
    "munich": {"street": "100 Tech Park", "city": "Munich", "postal_code": "80331",
               "country": "Germany", "latitude": 48.1351, "longitude": 11.5820},
    "vienna": {"street": "200 Innovation Hub", "city": "Vienna", "postal_code": "1010",
               "country": "Austria", "latitude": 48.2082, "longitude": 16.3738},
    "milan": {"street": "300 Industrial Zone", "city": "Milan", "postal_code": "20121",
              "country": "Italy", "latitude": 45.4642, "longitude": 9.1900},
    "zurich": {"street": "400 Logistics Center", "city": "Zurich", "postal_code": "8001",
               "country": "Switzerland", "latitude": 47.3769, "longitude": 8.5417},
}


def _constraints(tail_lift: bool, forklift: bool, indoor: bool, appointment: bool) -> dict:
    return {
        "tail_lift_required": tail_lift,
        "forklift_required": forklift,
        "indoor_delivery": indoor,
        "appointment_required": appointment,
    }


# key, shipper, status, from, to, pickup start/delivery start (hours from now),
# window length (hours), pallets, weight, adr, constraints, notes, price range,
# assigned carrier, assigned (hours from now)
SHIPMENTS = [
    ("s1", "shipper", "open", "amsterdam", "rotterdam", 24, 48, 1, 2, 1500, False,
     _constraints(True, False, False, False), "Handle with care - fragile goods", (200, 350), None, None),
    ("s2", "shipper2", "assigned", "utrecht", "eindhoven", 48, 72, 2, 4, 2800, False,
     _constraints(False, True, True, True), "Electronics shipment - temperature controlled", (450, 650),
     "carrier", -2),
    ("s3", "shipper", "in-transit", "hamburg", "berlin", -24, 12, 1, 6, 4200, True,
     _constraints(True, False, False, True), "Dangerous goods - ADR certified driver required", (800, 1200),
     "carrier2", -24),
    ("s4", "shipper2", "delivered", "antwerp", "brussels", -120, -72, 2, 3, 2100, False,
     _constraints(False, True, False, False), "Completed successfully - on time delivery", (300, 450),
     "carrier", -120),
    ("s5", "shipper", "open", "munich", "vienna", 72, 96, 3, 8, 3200, False,
     _constraints(True, False, True, True), "High-value electronics - secure handling required", (600, 900),
     None, None),
    ("s6", "shipper2", "open", "milan", "zurich", 120, 144, 4, 5, 2500, True,
     _constraints(False, True, False, False), "Chemical products - ADR certification mandatory", (700, 1100),
     None, None),
]

# shipment, carrier, price, eta pickup (hours from now), status, message
BIDS = [
    ("s1", "carrier", 280, 25, "pending", "I can pick up tomorrow morning. Have experience with fragile goods."),
    ("s1", "carrier2", 320, 26, "pending", "Available for pickup. Professional handling guaranteed."),
    ("s2", "carrier", 580, 51, "accepted", "Perfect for my route. Can handle temperature controlled goods."),
    ("s1", "carrier3", 300, 28, "pending", "New to platform but eager to prove reliability."),
    ("s2", "carrier2", 520, 52, "declined", "Competitive rate with excellent service record."),
    ("s3", "carrier2", 950, -20, "accepted", "ADR certified driver available. Can handle dangerous goods safely."),
    ("s4", "carrier", 380, -120, "accepted", "Local driver familiar with Brussels area. Can deliver on time."),
    ("s5", "carrier", 750, 74, "pending", "Secure transport specialist. Can handle high-value electronics."),
    ("s5", "carrier2", 820, 73, "pending", "Insured transport with GPS tracking available."),
    ("s6", "carrier2", 850, 122, "pending", "ADR certified driver with 10+ years experience."),
    ("s6", "carrier", 920, 123, "pending", "Specialized chemical transport equipment available."),
]

MESSAGES = [
    ("s1", "shipper", "Hi, I have a question about the pickup time. Can we schedule it for 9 AM instead of 8 AM?"),
    ("s1", "carrier", "Sure! 9 AM works perfectly for me. I'll be there with a tail lift truck."),
    ("s2", "shipper2", "Please ensure temperature is maintained at 2-8°C during transport."),
    ("s2", "carrier", "No problem! My truck has temperature control. I'll monitor it throughout the journey."),
    ("s3", "shipper", "The ADR documents are ready. Driver needs to bring valid ADR license."),
    ("s3", "carrier2", "Confirmed! I have ADR certification and all required safety equipment."),
]

# user, type, title, message, read, shipment
NOTIFICATIONS = [
    ("shipper", "bid_received", "New Bid Received",
     "You received a new bid of €280 for shipment from Amsterdam to Rotterdam", False, "s1"),
    ("shipper", "bid_accepted", "Bid Accepted",
     "Your bid for shipment to Eindhoven has been accepted by the shipper", True, "s2"),
    ("carrier", "shipment_assigned", "Shipment Assigned",
     "You have been assigned to transport electronics from Utrecht to Eindhoven", False, "s2"),
    ("carrier2", "shipment_delivered", "Delivery Completed",
     "Your delivery to Berlin has been completed successfully", True, "s3"),
    ("shipper2", "info", "Payment Processed",
     "Payment of €450 has been processed for your completed shipment", False, "s4"),
]

# latitude, longitude, hours from now, status, notes
TRACKING_POINTS = [
    (53.5511, 9.9937, -20, "Picked up", "Shipment picked up from Hamburg port"),
    (52.5200, 13.4050, -10, "In transit", "Currently on A10 highway, making good progress"),
    (52.5200, 13.4050, -2, "Near destination", "Approaching Berlin distribution center"),
]

RATINGS = [
    ("s4", "shipper2", "carrier", 5,
     "Excellent service! Driver was punctual, professional, and handled the goods with care. Highly recommended."),
    ("s4", "carrier", "shipper2", 4,
     "Good communication throughout the process. Clear instructions and flexible with timing."),
]

TEMPLATES = [
    ("shipper", "Electronics - Amsterdam to Rotterdam", "amsterdam", "rotterdam", 2, 1500,
     _constraints(True, False, False, False), "Standard electronics transport template"),
    ("shipper2", "Temperature Controlled - Utrecht to Eindhoven", "utrecht", "eindhoven", 4, 2800,
     _constraints(False, True, True, True), "Temperature controlled goods template"),
]

# carrier, name, max radius, max bid amount, adr allowed
AUTO_BID_RULES = [
    ("carrier", "Standard Pallet Transport", 200, 500, False),
    ("carrier", "ADR Dangerous Goods", 300, 1000, True),
    ("carrier2", "Temperature Controlled", 150, 600, False),
]

COST_MODELS = [
    ("carrier", {"name": "Standard Rate Card", "cost_per_km": 0.45, "driver_cost_per_hour": 25,
                 "load_time_minutes": 30, "unload_time_minutes": 30, "average_speed_kmh": 70,
                 "platform_fee_percentage": 8.5, "fuel_cost_per_km": 0.12, "maintenance_cost_per_km": 0.08,
                 "insurance_cost_per_km": 0.05, "is_active": True}),
    ("carrier2", {"name": "Premium Service", "cost_per_km": 0.6, "driver_cost_per_hour": 32,
                  "load_time_minutes": 20, "unload_time_minutes": 20, "average_speed_kmh": 75,
                  "platform_fee_percentage": 8.5, "fuel_cost_per_km": 0.15, "maintenance_cost_per_km": 0.1,
                  "insurance_cost_per_km": 0.07, "is_active": True}),
    ("carrier2", {"name": "Economy Service", "cost_per_km": 0.35, "driver_cost_per_hour": 20,
                  "load_time_minutes": 45, "unload_time_minutes": 45, "average_speed_kmh": 65,
                  "platform_fee_percentage": 8.5, "fuel_cost_per_km": 0.1, "maintenance_cost_per_km": 0.06,
                  "insurance_cost_per_km": 0.04, "is_active": False}),
]

BLOG_POSTS = [
    {
        "title": "The Future of Pallet Freight: Digital Transformation in Logistics",
        "slug": "future-pallet-freight-digital-transformation",
        "date": "2024-01-15",
        "content": (
            "<p>The logistics industry is undergoing a massive digital transformation, and pallet freight "
            "is at the forefront of this revolution.</p>"
            "<h2>Digital Platforms: The Game Changer</h2>"
            "<p>Intelligent matching, real-time tracking and automated processes reduce empty miles and "
            "administrative overhead for shippers and carriers alike.</p>"
            "<h2>Conclusion</h2>"
            "<p>Companies that embrace these technologies will be better positioned to compete in an "
            "increasingly complex logistics landscape.</p>"
        ),
        "excerpt": (
            "Discover how digital platforms are revolutionizing the pallet freight industry, making shipping "
            "more efficient and cost-effective for businesses of all sizes."
        ),
        "author": "Sarah Johnson",
        "author_bio": (
            "Sarah is a logistics technology expert with over 10 years of experience in freight management "
            "and digital transformation."
        ),
        "author_image": "https://images.unsplash.com/photo-1494790108755-2616b612b786?w=100&h=100&fit=crop&crop=face",
        "category": "Industry Insights",
        "read_time": "5 min read",
        "image": "https://images.unsplash.com/photo-1586528116311-ad8dd3c8310d?w=800&h=400&fit=crop",
        "featured": True,
        "tags": ["Digital Transformation", "Logistics", "Freight", "Technology"],
    },
    {
        "title": "How to Choose the Right Carrier for Your Shipments",
        "slug": "how-to-choose-right-carrier-shipments",
        "date": "2024-01-10",
        "content": (
            "<p>Selecting the right carrier is crucial for successful freight management.</p>"
            "<h2>1. Assess Your Requirements</h2>"
            "<p>Define shipment volume, geographic coverage, service level, special requirements such as "
            "ADR or tail lifts, and your budget.</p>"
            "<h2>2. Check Performance Metrics</h2>"
            "<p>Look at on-time delivery, damage rate, customer satisfaction and response time.</p>"
            "<h2>Conclusion</h2>"
            "<p>The cheapest option isn't always the best. Focus on reliability, service and value.</p>"
        ),
        "excerpt": (
            "Learn the key factors to consider when selecting a carrier, from pricing and reliability to "
            "specialized services and coverage areas."
        ),
        "author": "Mike Chen",
        "author_bio": "Mike is a supply chain consultant specializing in carrier selection and freight optimization strategies.",
        "author_image": "https://images.unsplash.com/photo-1472099645785-5658abf4ff4e?w=100&h=100&fit=crop&crop=face",
        "category": "Shipping Tips",
        "read_time": "4 min read",
        "image": "https://images.unsplash.com/photo-1566576912321-d58ddd7a6088?w=800&h=400&fit=crop",
        "featured": False,
        "tags": ["Carrier Selection", "Logistics", "Best Practices"],
    },
    {
        "title": "Cost Optimization Strategies for Pallet Shipping",
        "slug": "cost-optimization-strategies-pallet-shipping",
        "date": "2024-01-05",
        "content": (
            "<p>Reducing shipping costs while maintaining service quality is a constant challenge for "
            "businesses.</p>"
            "<h2>1. Consolidate Shipments</h2>"
            "<p>Batch orders going to the same region and combine shipments on efficient routes.</p>"
            "<h2>2. Optimize Pallet Utilization</h2>"
            "<p>Use proper palletization and standard pallet sizes for better carrier compatibility.</p>"
            "<h2>Conclusion</h2>"
            "<p>Cost optimization is an ongoing process that requires continuous monitoring and adjustment.</p>"
        ),
        "excerpt": (
            "Explore proven strategies to reduce your pallet shipping costs while maintaining service quality "
            "and delivery reliability."
        ),
        "author": "Emma Davis",
        "author_bio": (
            "Emma is a logistics cost optimization specialist with expertise in freight management and "
            "supply chain efficiency."
        ),
        "author_image": "https://images.unsplash.com/photo-1438761681033-6461ffad8d80?w=100&h=100&fit=crop&crop=face",
        "category": "Cost Management",
        "read_time": "6 min read",
        "image": "https://images.unsplash.com/photo-1558618666-fcd25c85cd64?w=800&h=400&fit=crop",
        "featured": False,
        "tags": ["Cost Optimization", "Shipping", "Efficiency"],
    },
]


def _hours_from(now: datetime, hours: float) -> datetime:
    return now + timedelta(hours=hours)


def _stamp(value: datetime) -> str:
    return value.isoformat(timespec="seconds").replace("+00:00", "Z")


def seed_database() -> Dict[str, int]:
    """Populate an empty store with the demo fixtures.

    Returns
    -------
    Dict[str, int]
        Number of rows created per table.
    """
    now = datetime.now(timezone.utc)
    created = utcnow()
    # One hash for every account keeps startup fast
    password_hash = hash_password(settings.seed_password)
    users: Dict[str, int] = {}
    shipments: Dict[str, int] = {}
    with get_cursor() as cursor:
        for key, email, role, verification, profile in USERS:
            user_id = insert_user(cursor, email, password_hash, role, verification)
            assignments = ", ".join(f"{column} = ?" for column in profile)
            cursor.execute(
                f"UPDATE user_profiles SET {assignments} WHERE user_id = ?",
                tuple(profile.values()) + (user_id,),
            )
            users[key] = user_id

        for (key, shipper, status, origin, destination, pickup_in, delivery_in, window_hours, quantity,
             weight, adr, constraints, notes, (price_min, price_max), carrier, assigned_in) in SHIPMENTS:
            pickup_start = _hours_from(now, pickup_in)
            delivery_start = _hours_from(now, delivery_in)
            data = ShipmentCreate(
                from_address=ADDRESSES[origin],
                to_address=ADDRESSES[destination],
                pickup_window={"start": pickup_start, "end": pickup_start + timedelta(hours=window_hours)},
                delivery_window={"start": delivery_start, "end": delivery_start + timedelta(hours=window_hours)},
                pallets={"quantity": quantity, "dimensions": STANDARD_PALLET, "weight": weight},
                adr_required=adr,
                constraints=constraints,
                notes=notes,
                price_guidance={"min": price_min, "max": price_max},
            )
            shipment_id = insert_shipment(cursor, users[shipper], data, status=status)
            if carrier:
                cursor.execute(
                    "UPDATE shipments SET assigned_carrier_id = ?, assigned_at = ? WHERE id = ?",
                    (users[carrier], _stamp(_hours_from(now, assigned_in)), shipment_id),
                )
            shipments[key] = shipment_id

        for shipment, carrier, price, eta_in, status, message in BIDS:
            cursor.execute(
                """
                INSERT INTO bids (shipment_id, carrier_id, price, eta_pickup, message, status, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (shipments[shipment], users[carrier], price, _stamp(_hours_from(now, eta_in)),
                 message, status, created, created),
            )
            if status == "accepted":
                cursor.execute(
                    "UPDATE shipments SET accepted_price = ? WHERE id = ?", (price, shipments[shipment])
                )

        for shipment, sender, content in MESSAGES:
            cursor.execute(
                "INSERT INTO messages (shipment_id, sender_id, content, created_at) VALUES (?, ?, ?, ?)",
                (shipments[shipment], users[sender], content, created),
            )

        for user, kind, title, message, read, shipment in NOTIFICATIONS:
            cursor.execute(
                """
                INSERT INTO notifications (user_id, title, message, type, shipment_id, read, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (users[user], title, message, kind, shipments[shipment], 1 if read else 0, created),
            )

        for lat, lng, hours, status, notes in TRACKING_POINTS:
            cursor.execute(
                """
                INSERT INTO tracking_points (shipment_id, latitude, longitude, timestamp, status, notes)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (shipments["s3"], lat, lng, _stamp(_hours_from(now, hours)), status, notes),
            )

        cursor.execute(
            """
            INSERT INTO pods (shipment_id, carrier_id, photo_url, signature_url, recipient_name,
                              delivery_notes, delivered_at, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                shipments["s4"],
                users["carrier"],
                "/mock-pod-photo.jpg",
                "/mock-signature.jpg",
                "Maria Schmidt",
                "Delivered to loading dock as requested. Recipient confirmed goods in good condition.",
                _stamp(_hours_from(now, -72)),
                created,
            ),
        )

        for shipment, rater, ratee, rating, comment in RATINGS:
            cursor.execute(
                """
                INSERT INTO ratings (shipment_id, rater_id, ratee_id, rating, comment, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (shipments[shipment], users[rater], users[ratee], rating, comment, created),
            )

        for shipper, name, origin, destination, quantity, weight, constraints, notes in TEMPLATES:
            cursor.execute(
                """
                INSERT INTO shipment_templates (shipper_id, name, from_address, to_address, pallets,
                                                adr_required, constraints, notes, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, 0, ?, ?, ?, ?)
                """,
                (
                    users[shipper],
                    name,
                    to_json(ADDRESSES[origin]),
                    to_json(ADDRESSES[destination]),
                    to_json({"quantity": quantity, "dimensions": STANDARD_PALLET, "weight": weight}),
                    to_json(constraints),
                    notes,
                    created,
                    created,
                ),
            )

        for carrier, name, radius, max_bid, adr in AUTO_BID_RULES:
            cursor.execute(
                """
                INSERT INTO auto_bid_rules (carrier_id, name, max_radius_km, max_bid_amount, adr_allowed,
                                            is_active, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, 1, ?, ?)
                """,
                (users[carrier], name, radius, max_bid, 1 if adr else 0, created, created),
            )

        for carrier, model in COST_MODELS:
            columns = ("carrier_id",) + tuple(model) + ("created_at", "updated_at")
            values = (users[carrier],) + tuple(
                int(v) if isinstance(v, bool) else v for v in model.values()
            ) + (created, created)
            cursor.execute(
                f"INSERT INTO cost_models ({', '.join(columns)}) VALUES ({', '.join('?' for _ in columns)})",
                values,
            )

        for post in BLOG_POSTS:
            cursor.execute(
                """
                INSERT INTO blog_posts (title, slug, content, excerpt, author, author_bio, author_image, date,
                    category, read_time, image, featured, tags, status, published_at, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 'published', ?, ?, ?)
                """,
                (
                    post["title"], post["slug"], post["content"], post["excerpt"], post["author"],
                    post["author_bio"], post["author_image"], post["date"], post["category"],
                    post["read_time"], post["image"], 1 if post["featured"] else 0, to_json(post["tags"]),
                    f"{post['date']}T00:00:00Z", created, created,
                ),
            )

    counts = {
        "users": len(USERS),
        "shipments": len(SHIPMENTS),
        "bids": len(BIDS),
        "messages": len(MESSAGES),
        "notifications": len(NOTIFICATIONS),
        "tracking_points": len(TRACKING_POINTS),
        "pods": 1,
        "ratings": len(RATINGS),
        "templates": len(TEMPLATES),
        "auto_bid_rules": len(AUTO_BID_RULES),
        "cost_models": len(COST_MODELS),
        "blog_posts": len(BLOG_POSTS),
    }
    logger.info("Database seeded: %s", ", ".join(f"{k}={v}" for k, v in counts.items()))
    return counts
