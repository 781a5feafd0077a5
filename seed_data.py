"""Fixed datasets used to bootstrap an empty catalog and account store."""
from hashing import DEMO_CREDENTIALS

SEED_PIECES = [
    {
        'id': 'sunset-warrior',
        'name': 'Sunset Warrior',
        'story': 'Created during golden hour in Accra. The pattern comes from a grandmother\'s wedding cloth, merged with Japanese selvedge denim.',
        'fabricOrigin': 'Kente cloth from Ghana + Okayama denim',
        'denimType': '21oz Japanese selvedge',
        'vibe': 'Bold confidence',
        'imageUrl': '/kobby-assets/models/IMG_3479.JPG',
        'voiceNoteUrl': '/audio/sunset-warrior.mp3',
        'createdFor': 'The soul who walks into rooms and changes the energy',
        'currentLocation': 'Bangkok',
        'weight': 3.5,
        'views': 147,
        'hearts': 43,
        'inquiries': 12,
        'price': 450,
        'available': True,
        'category': 't-shirts',
        'availableSizes': ['S', 'M', 'L', 'XL'],
        'wornBy': [
            {
                'name': 'Maya',
                'location': 'Berlin',
                'story': 'Wore this to Berghain. Got stopped 5 times by people asking about it.',
                'photoUrl': '/kobby-assets/models/IMG_3481.JPG',
            }
        ],
    },
    {
        'id': 'midnight-bloom',
        'name': 'Midnight Bloom',
        'story': 'Inspired by late night conversations in Lagos markets. The indigo patterns represent thoughts that only come alive after midnight.',
        'fabricOrigin': 'Adire patterns from Nigeria + Italian denim',
        'denimType': 'Candiani stretch denim',
        'vibe': 'Mysterious elegance',
        'imageUrl': '/kobby-assets/models/IMG_3495.JPG',
        'createdFor': 'Night owls who find beauty in shadows',
        'currentLocation': 'Bangkok',
        'weight': 2.8,
        'views': 203,
        'hearts': 67,
        'inquiries': 23,
        'price': 380,
        'available': True,
        'category': 'kh-specials',
        'availableSizes': ['XS', 'S', 'M', 'L'],
    },
    {
        'id': 'festival-spirit',
        'name': 'Festival Spirit',
        'story': 'Born at Burning Man, refined in Bangkok. This piece understands the dance floor at 4am and sunrise conversations.',
        'fabricOrigin': 'Bogolan mud cloth from Mali + American raw denim',
        'denimType': 'Cone Mills White Oak',
        'vibe': 'Free spirit energy',
        'imageUrl': '/kobby-assets/models/IMG_3515.JPG',
        'videoUrl': '/video/festival-spirit.mp4',
        'createdFor': 'Dancers who lose themselves to find themselves',
        'currentLocation': 'Bangkok',
        'weight': 3.2,
        'views': 389,
        'hearts': 124,
        'inquiries': 45,
        'price': 420,
        'available': True,
        'category': 'limited',
        'availableSizes': ['M', 'L', 'XL', 'XXL'],
    },
    {
        'id': 'urban-roots',
        'name': 'Urban Roots',
        'story': 'For those who carry villages in their hearts while conquering cities.',
        'fabricOrigin': 'Shweshwe print from South Africa + Japanese denim',
        'denimType': 'Kuroki Mills deep indigo',
        'vibe': 'Grounded power',
        'imageUrl': '/kobby-assets/models/IMG_3543.JPG',
        'createdFor': 'City souls with ancestral memory',
        'currentLocation': 'Bangkok',
        'weight': 3.8,
        'views': 156,
        'hearts': 51,
        'inquiries': 18,
        'price': 480,
        'available': True,
        'category': 'denims',
        'availableSizes': ['S', 'M', 'L'],
    },
    {
        'id': 'gentle-rebel',
        'name': 'Gentle Rebel',
        'story': 'Soft power manifested in fabric. Created for those who change the world with kindness.',
        'fabricOrigin': 'Kitenge from Kenya + Organic cotton denim',
        'denimType': 'GOTS certified organic',
        'vibe': 'Quiet strength',
        'imageUrl': '/kobby-assets/shirts/IMG_1584.JPG',
        'voiceNoteUrl': '/audio/gentle-rebel.mp3',
        'createdFor': 'Revolutionaries who lead with love',
        'currentLocation': 'Bangkok',
        'weight': 2.5,
        'views': 298,
        'hearts': 89,
        'inquiries': 34,
        'price': 350,
        'available': False,
        'category': 't-shirts',
        'availableSizes': ['XS', 'S'],
    },
    {
        'id': 'ocean-dreams',
        'name': 'Ocean Dreams',
        'story': 'Inspired by the Atlantic touching African shores. For souls who find peace in motion.',
        'fabricOrigin': 'Ankara from Cameroon + Portuguese denim',
        'denimType': 'Sustainable Portuguese mills',
        'vibe': 'Flowing freedom',
        'imageUrl': '/kobby-assets/shirts/IMG_1585.JPG',
        'createdFor': 'Wanderers who collect horizons',
        'currentLocation': 'Bangkok',
        'weight': 3.0,
        'views': 234,
        'hearts': 71,
        'inquiries': 27,
        'price': 400,
        'available': True,
        'category': 'kh-tailored',
        'availableSizes': ['M', 'L', 'XL'],
    },
    {
        'id': 'golden-hour',
        'name': 'Golden Hour',
        'story': 'That magical time when everything is possible. The gold threads catch light like hope.',
        'fabricOrigin': 'Aso Oke from Nigeria + Vintage American denim',
        'denimType': 'Deadstock Levi\'s fabric',
        'vibe': 'Optimistic magic',
        'imageUrl': '/kobby-assets/models/IMG_3622.JPG',
        'videoUrl': '/video/golden-hour.mp4',
        'createdFor': 'Believers in beautiful tomorrows',
        'currentLocation': 'Bangkok',
        'weight': 3.3,
        'views': 445,
        'hearts': 143,
        'inquiries': 52,
        'price': 520,
        'available': True,
        'category': 'khlassic-suits',
        'availableSizes': ['S', 'M', 'L', 'XL', 'XXL'],
    },
    {
        'id': 'night-market',
        'name': 'Night Market',
        'story': 'Bangkok nights, African days. This piece understands hustle, community, and finding family among strangers.',
        'fabricOrigin': 'Wax print fusion + Thai-woven denim',
        'denimType': 'Local Thai artisan denim',
        'vibe': 'Street wisdom',
        'imageUrl': '/kobby-assets/models/IMG_3644.JPG',
        'createdFor': 'Hustlers with heart',
        'currentLocation': 'Bangkok',
        'weight': 2.9,
        'views': 178,
        'hearts': 56,
        'inquiries': 21,
        'price': 360,
        'available': True,
        'category': 'khlassic-suits',
        'availableSizes': ['XS', 'S', 'M', 'L', 'XL'],
    },
]


def default_users(now: str) -> list:
    return [
        {
            'id': 'user_admin_001',
            'email': DEMO_CREDENTIALS['ADMIN_EMAIL'],
            'passwordHash': DEMO_CREDENTIALS['ADMIN_PASSWORD_HASH'],
            'name': 'Admin User',
            'role': 'admin',
            'joinDate': '2024-01-01T00:00:00.000Z',
            'lastLogin': now,
            'isActive': True,
            'emailVerified': True,
            'notificationPreferences': {'orderUpdates': True, 'marketing': False, 'tryOnReminders': True},
        },
        {
            'id': 'user_john_002',
            'email': DEMO_CREDENTIALS['USER_EMAIL'],
            'passwordHash': DEMO_CREDENTIALS['USER_PASSWORD_HASH'],
            'name': 'John Doe',
            'role': 'user',
            'phone': '+1 234 567 8900',
            'address': {'street': '123 Main Street', 'city': 'New York', 'country': 'USA', 'postalCode': '10001'},
            'orders': [
                {
                    'id': 'ORD001',
                    'date': '2025-01-10',
                    'items': [{'name': 'African Heritage Jacket', 'price': 299, 'quantity': 1}],
                    'total': 299,
                    'status': 'delivered',
                },
                {
                    'id': 'ORD002',
                    'date': '2025-01-15',
                    'items': [
                        {'name': 'Urban Kiz Shirt', 'price': 89, 'quantity': 2},
                        {'name': 'Festival Pants', 'price': 129, 'quantity': 1},
                    ],
                    'total': 307,
                    'status': 'shipped',
                },
            ],
            'favorites': ['piece-1', 'piece-3'],
            'tryOnRequests': [
                {
                    'festivalId': 'fest-1',
                    'festivalName': 'Bangkok Kizomba Festival',
                    'items': ['piece-2', 'piece-4'],
                    'status': 'confirmed',
                    'date': '2025-01-20',
                }
            ],
            'joinDate': '2024-06-15T00:00:00.000Z',
            'lastLogin': now,
            'isActive': True,
            'emailVerified': True,
            'notificationPreferences': {'orderUpdates': True, 'marketing': True, 'tryOnReminders': True},
        },
        {
            'id': 'user_sarah_003',
            'email': DEMO_CREDENTIALS['USER2_EMAIL'],
            'passwordHash': DEMO_CREDENTIALS['USER2_PASSWORD_HASH'],
            'name': 'Sarah Johnson',
            'role': 'user',
            'phone': '+44 20 7946 0958',
            'address': {'street': '45 Oxford Street', 'city': 'London', 'country': 'UK', 'postalCode': 'W1D 1BZ'},
            'orders': [
                {
                    'id': 'ORD003',
                    'date': '2025-01-08',
                    'items': [{'name': 'Tarraxo Collection Dress', 'price': 189, 'quantity': 1}],
                    'total': 189,
                    'status': 'delivered',
                }
            ],
            'favorites': ['piece-2'],
            'joinDate': '2024-09-20T00:00:00.000Z',
            'lastLogin': now,
            'isActive': True,
            'emailVerified': True,
            'notificationPreferences': {'orderUpdates': True, 'marketing': False, 'tryOnReminders': True},
        },
    ]
