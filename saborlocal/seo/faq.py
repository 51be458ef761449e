"""Static and generated FAQ sets for voice search and "People Also Ask" boxes."""

from __future__ import annotations

from ..content.models import FAQ


def _faqs(pairs: list[tuple[str, str]]) -> list[FAQ]:
    return [FAQ(question=q, answer=a) for q, a in pairs]


GENERAL_FAQS = _faqs([
    (
        "¿Cómo puedo hacer una reserva en un restaurante?",
        "Para hacer una reserva, puedes llamar directamente al restaurante, usar su página web si tienen "
        "sistema de reservas online, o utilizar aplicaciones como OpenTable o ElTenedor. Te recomendamos "
        "reservar con antelación, especialmente los fines de semana.",
    ),
    (
        "¿Qué significa cada símbolo de precio en los restaurantes?",
        "Los símbolos de precio indican el rango de precios: € (económico, menos de 20€ por persona), "
        "€€ (moderado, 20-40€), €€€ (caro, 40-80€), y €€€€ (muy caro, más de 80€ por persona). Estos "
        "precios incluyen entrante, plato principal y postre.",
    ),
    (
        "¿Cuáles son los horarios típicos de los restaurantes en España?",
        "Los restaurantes en España suelen abrir para el almuerzo de 13:30 a 16:00 y para la cena de "
        "20:30 a 23:30. Los horarios pueden variar según la región y el tipo de establecimiento. Los "
        "domingos muchos restaurantes cierran por la noche.",
    ),
    (
        "¿Cómo saber si un restaurante es apto para vegetarianos o veganos?",
        "Busca en la descripción del restaurante menciones de opciones vegetarianas o veganas. Muchos "
        "restaurantes indican claramente en su carta los platos aptos para estas dietas. También puedes "
        "llamar con antelación para confirmar las opciones disponibles.",
    ),
    (
        "¿Qué debo hacer si tengo alergias alimentarias?",
        "Informa siempre de tus alergias al hacer la reserva y recuerda mencionarlo nuevamente al camarero. "
        "Por ley, los restaurantes deben proporcionar información sobre los 14 alérgenos principales. No "
        "dudes en preguntar sobre los ingredientes de cualquier plato.",
    ),
])

NEAR_ME_FAQS = _faqs([
    (
        "¿Cómo encontrar buenos restaurantes cerca de mi ubicación?",
        "Usa aplicaciones como Google Maps, TripAdvisor o nuestra web para buscar restaurantes por ubicación. "
        "Activa la geolocalización para ver opciones cercanas con valoraciones y reseñas de otros usuarios.",
    ),
    (
        "¿Qué restaurantes están abiertos ahora cerca de mí?",
        "Consulta Google Maps o llama directamente a los restaurantes para confirmar horarios actuales. Los "
        "horarios pueden cambiar por festivos, vacaciones o circunstancias especiales.",
    ),
    (
        "¿Hay restaurantes con terraza cerca de mi zona?",
        'Busca en las descripciones de los restaurantes menciones de "terraza" o "patio". También puedes '
        "filtrar por esta característica en aplicaciones de búsqueda de restaurantes o preguntar al hacer "
        "la reserva.",
    ),
    (
        "¿Qué restaurantes cerca de mí ofrecen servicio a domicilio?",
        "Consulta aplicaciones como Uber Eats, Glovo, Just Eat o Deliveroo para ver qué restaurantes "
        "entregan en tu zona. También puedes llamar directamente a los restaurantes para preguntar por su "
        "servicio de delivery.",
    ),
])

ACCESSIBILITY_FAQS = _faqs([
    (
        "¿Cómo saber si un restaurante es accesible para sillas de ruedas?",
        "Busca información sobre accesibilidad en la descripción del restaurante o llama para preguntar "
        "sobre entrada sin escalones, puertas anchas, baños adaptados y mesas accesibles. La ley exige que "
        "los locales cumplan ciertos requisitos de accesibilidad.",
    ),
    (
        "¿Qué restaurantes admiten mascotas?",
        "Busca establecimientos que mencionen específicamente que admiten mascotas o tienen terraza "
        "pet-friendly. Siempre confirma al hacer la reserva, ya que las políticas pueden variar según el "
        "área del restaurante (interior vs terraza).",
    ),
    (
        "¿Hay restaurantes con opciones para niños?",
        "Muchos restaurantes familiares ofrecen menús infantiles, tronas y cambiadores. Busca menciones de "
        '"family-friendly" en las reseñas o pregunta al hacer la reserva sobre las facilidades para '
        "familias con niños.",
    ),
])

SEASONAL_FAQS = _faqs([
    (
        "¿Qué restaurantes tienen menú de temporada?",
        "Los restaurantes de cocina de temporada actualizan sus cartas según los productos estacionales "
        'disponibles. Busca establecimientos que mencionen "cocina de mercado" o "productos de temporada" '
        "en su descripción.",
    ),
    (
        "¿Qué restaurantes ofrecen menús especiales para celebraciones?",
        "Muchos restaurantes preparan menús especiales para Navidad, San Valentín, Día de la Madre y otras "
        "celebraciones. Consulta sus webs o redes sociales durante estas fechas, o llama para preguntar por "
        "opciones especiales.",
    ),
    (
        "¿Hay restaurantes abiertos los días festivos?",
        "Los horarios de festivos varían mucho entre restaurantes. Te recomendamos llamar con antelación "
        "para confirmar si estarán abiertos en días como Navidad, Año Nuevo, o festivos locales.",
    ),
])

COMPARISON_FAQS = _faqs([
    (
        "¿Cómo elegir entre varios restaurantes similares?",
        "Compara las reseñas recientes, puntuaciones por categorías (comida, servicio, ambiente), rango de "
        "precios, y especialidades. Lee comentarios específicos sobre los platos que te interesan y "
        "considera la ubicación y facilidad de aparcamiento.",
    ),
    (
        "¿Qué diferencia hay entre un restaurante de tapas y un bar de pinchos?",
        "Los bares de tapas suelen ofrecer raciones más variadas para compartir, mientras que los bares de "
        "pinchos se especializan en pequeñas porciones individuales servidas sobre pan. Ambos son perfectos "
        "para probar diferentes sabores.",
    ),
    (
        "¿Cuál es la diferencia entre un menú del día y una carta?",
        "El menú del día es una opción fija con precio cerrado (generalmente más económica) que incluye "
        "primer plato, segundo plato, postre y bebida. La carta permite elegir platos individuales con "
        "precios separados y mayor variedad.",
    ),
])

PAYMENT_FAQS = _faqs([
    (
        "¿Todos los restaurantes aceptan tarjeta de crédito?",
        "La mayoría de restaurantes aceptan tarjetas, pero algunos establecimientos pequeños o tradicionales "
        "pueden ser solo efectivo. Siempre es recomendable preguntar al hacer la reserva o llevar efectivo "
        "como respaldo.",
    ),
    (
        "¿Cuánta propina se debe dejar en un restaurante?",
        "En España, la propina no es obligatoria pero se aprecia. Lo habitual es dejar entre 5-10% de la "
        "cuenta si el servicio ha sido bueno. En bares de tapas es común redondear la cuenta o dejar el "
        "cambio pequeño.",
    ),
    (
        "¿Los restaurantes aceptan pagos móviles como Apple Pay o Google Pay?",
        "Cada vez más restaurantes aceptan pagos móviles, especialmente en ciudades grandes. Sin embargo, no "
        "es universal, por lo que es recomendable preguntar o tener alternativas de pago disponibles.",
    ),
])

VOICE_SEARCH_FAQS: dict[str, list[FAQ]] = {
    "general": GENERAL_FAQS,
    "near_me": NEAR_ME_FAQS,
    "accessibility": ACCESSIBILITY_FAQS,
    "seasonal": SEASONAL_FAQS,
    "comparison": COMPARISON_FAQS,
    "payment": PAYMENT_FAQS,
}


def get_city_faqs(city_name: str) -> list[FAQ]:
    return _faqs([
        (
            f"¿Cuáles son los mejores restaurantes en {city_name}?",
            f"Los mejores restaurantes en {city_name} varían según tus preferencias culinarias. Te "
            "recomendamos consultar nuestras reseñas más recientes, que incluyen valoraciones detalladas "
            "de comida, servicio, ambiente y relación calidad-precio para cada establecimiento.",
        ),
        (
            f"¿Dónde comer barato en {city_name}?",
            f"En {city_name} encontrarás opciones económicas (€) en nuestras reseñas. Busca restaurantes "
            "con menú del día, bares de tapas, o establecimientos familiares que suelen ofrecer mejor "
            "relación calidad-precio.",
        ),
        (
            f"¿Qué restaurantes en {city_name} tienen buenas vistas?",
            f"Para restaurantes con vistas en {city_name}, busca en nuestras reseñas menciones de "
            '"terraza", "vistas" o "panorámica". También puedes filtrar por restaurantes en zonas altas '
            "o cerca del mar si aplica a la ciudad.",
        ),
        (
            f"¿Hay restaurantes típicos de la región en {city_name}?",
            f"Sí, en {city_name} encontrarás restaurantes especializados en cocina local y regional. Busca "
            "en nuestras categorías por tipo de cocina o lee las reseñas que destacan platos "
            "tradicionales de la zona.",
        ),
    ])


def get_category_faqs(category_name: str) -> list[FAQ]:
    name = category_name.lower()
    return _faqs([
        (
            f"¿Qué caracteriza a un buen restaurante de {name}?",
            f"Un buen restaurante de {name} se distingue por la calidad de sus ingredientes, la "
            "autenticidad de sus técnicas culinarias, el conocimiento del personal sobre los platos, y el "
            "ambiente apropiado para el tipo de cocina que sirven.",
        ),
        (
            f"¿Cuál es el rango de precios típico para restaurantes de {name}?",
            f"Los precios en restaurantes de {name} varían ampliamente. Consulta nuestro sistema de "
            "símbolos de precio (€ a €€€€) en cada reseña para encontrar opciones que se ajusten a tu "
            "presupuesto.",
        ),
        (
            f"¿Qué platos son imprescindibles en un restaurante de {name}?",
            "Los platos imprescindibles varían según el establecimiento, pero en nuestras reseñas "
            "destacamos siempre las especialidades y platos más recomendables de cada restaurante de "
            f"{name}.",
        ),
    ])


def get_venue_faqs(venue_name: str, city_name: str) -> list[FAQ]:
    return _faqs([
        (
            f"¿Cómo llegar a {venue_name} en {city_name}?",
            f"Puedes encontrar la dirección exacta de {venue_name} en nuestra reseña, junto con información "
            "sobre transporte público cercano y opciones de aparcamiento. También puedes usar Google Maps "
            "para obtener indicaciones precisas.",
        ),
        (
            f"¿Necesito reserva para comer en {venue_name}?",
            f"Te recomendamos hacer reserva en {venue_name}, especialmente los fines de semana y días "
            "festivos. Puedes llamar al teléfono que aparece en nuestra reseña o consultar si tienen "
            "sistema de reservas online.",
        ),
        (
            f"¿Cuáles son los horarios de {venue_name}?",
            f"Los horarios de {venue_name} están incluidos en nuestra reseña. Ten en cuenta que pueden "
            "cambiar por temporadas, festivos o circunstancias especiales, por lo que recomendamos "
            "confirmar llamando antes de tu visita.",
        ),
        (
            f"¿Qué hace especial a {venue_name} comparado con otros restaurantes?",
            f"En nuestra reseña detallada de {venue_name} destacamos qué lo hace único: sus especialidades "
            "culinarias, el ambiente, el servicio, y otros aspectos que lo distinguen de otros "
            f"establecimientos en {city_name}.",
        ),
    ])


def get_contextual_faqs(context: str, name: str | None = None, city_name: str | None = None) -> list[FAQ]:
    """
    FAQs for a page context: ``venue``, ``city``, ``category`` or anything
    else for the general set. Generated questions come first, followed by a
    few static ones.
    """
    if context == "venue":
        if name and city_name:
            return get_venue_faqs(name, city_name) + GENERAL_FAQS[:3]
        return GENERAL_FAQS[:5]
    if context == "city":
        if name:
            return get_city_faqs(name) + NEAR_ME_FAQS[:2] + ACCESSIBILITY_FAQS[:2]
        return NEAR_ME_FAQS + GENERAL_FAQS[:3]
    if context == "category":
        if name:
            return get_category_faqs(name) + COMPARISON_FAQS[:2] + GENERAL_FAQS[:2]
        return COMPARISON_FAQS + GENERAL_FAQS[:3]
    return GENERAL_FAQS + NEAR_ME_FAQS[:2] + PAYMENT_FAQS[:2]
