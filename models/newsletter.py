import json
from datetime import datetime

from sqlalchemy import event

from models.db import db

DEFAULT_INTERESTS = ["packages", "promotions"]

# soft bounces tolerated before the address is treated as dead
MAX_SOFT_BOUNCES = 5


class NewsletterSubscriber(db.Model):
    __tablename__ = "newsletter_subscribers"

    id = db.Column(db.Integer, primary_key=True)

    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    name = db.Column(db.String(100), nullable=True)

    status = db.Column(db.String(20), nullable=False, default="active", index=True)
    # status values: active, unsubscribed, bounced, spam

    interests_json = db.Column(db.Text, nullable=False, default="[]")
    frequency = db.Column(db.String(20), nullable=False, default="weekly")
    source = db.Column(db.String(20), nullable=False, default="website")

    subscribed_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    unsubscribed_at = db.Column(db.DateTime, nullable=True)
    unsubscribe_reason = db.Column(db.String(40), nullable=True)
    unsubscribe_feedback = db.Column(db.String(500), nullable=True)

    emails_sent = db.Column(db.Integer, default=0, nullable=False)
    last_email_sent = db.Column(db.DateTime, nullable=True)
    emails_opened = db.Column(db.Integer, default=0, nullable=False)
    last_email_opened = db.Column(db.DateTime, nullable=True)
    links_clicked = db.Column(db.Integer, default=0, nullable=False)
    last_link_clicked = db.Column(db.DateTime, nullable=True)

    ip_address = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)

    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    campaigns = db.relationship(
        "CampaignInteraction",
        back_populates="subscriber",
        order_by="CampaignInteraction.sent_at",
        cascade="all, delete-orphan",
    )
    bounces = db.relationship(
        "NewsletterBounce",
        back_populates="subscriber",
        order_by="NewsletterBounce.created_at",
        cascade="all, delete-orphan",
    )

    @property
    def interests(self):
        return json.loads(self.interests_json or "[]")

    @interests.setter
    def interests(self, values):
        self.interests_json = json.dumps(list(values or []))

    @property
    def engagement_rate(self) -> int:
        """Opens per email sent, as a whole percentage."""
        if not self.emails_sent:
            return 0
        return round(self.emails_opened / self.emails_sent * 100)

    @property
    def click_through_rate(self) -> int:
        if not self.emails_opened:
            return 0
        return round(self.links_clicked / self.emails_opened * 100)

    def unsubscribe(self, reason="other", feedback=None):
        self.status = "unsubscribed"
        self.unsubscribed_at = datetime.utcnow()
        self.unsubscribe_reason = reason
        if feedback:
            self.unsubscribe_feedback = feedback

    def resubscribe(self):
        self.status = "active"
        self.unsubscribed_at = None
        self.unsubscribe_reason = None
        self.unsubscribe_feedback = None

    def _campaign(self, campaign_id):
        for interaction in self.campaigns:
            if interaction.campaign_id == campaign_id:
                return interaction
        return None

    def record_email_sent(self, campaign_id, campaign_name):
        now = datetime.utcnow()
        self.emails_sent = (self.emails_sent or 0) + 1
        self.last_email_sent = now
        self.campaigns.append(CampaignInteraction(
            campaign_id=campaign_id,
            campaign_name=campaign_name,
            sent_at=now,
        ))

    def record_email_opened(self, campaign_id):
        now = datetime.utcnow()
        self.emails_opened = (self.emails_opened or 0) + 1
        self.last_email_opened = now
        interaction = self._campaign(campaign_id)
        if interaction and interaction.opened_at is None:
            interaction.opened_at = now

    def record_link_clicked(self, campaign_id, url):
        now = datetime.utcnow()
        self.links_clicked = (self.links_clicked or 0) + 1
        self.last_link_clicked = now
        interaction = self._campaign(campaign_id)
        if interaction:
            if interaction.clicked_at is None:
                interaction.clicked_at = now
            interaction.links = interaction.links + [{"url": url, "clickedAt": now.isoformat()}]

    def record_bounce(self, bounce_type, reason):
        """A hard bounce, or too many soft ones, marks the address bounced."""
        self.bounces.append(NewsletterBounce(bounce_type=bounce_type, reason=reason))
        if bounce_type == "hard" or len(self.bounces) >= MAX_SOFT_BOUNCES:
            self.status = "bounced"

    def record_complaint(self):
        self.status = "spam"

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "status": self.status,
            "interests": self.interests,
            "frequency": self.frequency,
            "source": self.source,
            "subscriptionDate": self.subscribed_at.isoformat() if self.subscribed_at else None,
            "unsubscribedAt": self.unsubscribed_at.isoformat() if self.unsubscribed_at else None,
            "unsubscribeReason": self.unsubscribe_reason,
            "emailsSent": self.emails_sent or 0,
            "emailsOpened": self.emails_opened or 0,
            "linksClicked": self.links_clicked or 0,
            "lastEmailSent": self.last_email_sent.isoformat() if self.last_email_sent else None,
            "engagementRate": self.engagement_rate,
            "clickThroughRate": self.click_through_rate,
            "bounceCount": len(self.bounces),
        }


class CampaignInteraction(db.Model):
    __tablename__ = "newsletter_campaign_interactions"

    id = db.Column(db.Integer, primary_key=True)
    subscriber_id = db.Column(db.Integer, db.ForeignKey("newsletter_subscribers.id"), nullable=False, index=True)

    campaign_id = db.Column(db.String(80), nullable=False, index=True)
    campaign_name = db.Column(db.String(200), nullable=False)

    sent_at = db.Column(db.DateTime, nullable=False)
    opened_at = db.Column(db.DateTime, nullable=True)
    clicked_at = db.Column(db.DateTime, nullable=True)
    links_json = db.Column(db.Text, nullable=False, default="[]")

    subscriber = db.relationship("NewsletterSubscriber", back_populates="campaigns")

    @property
    def links(self):
        return json.loads(self.links_json or "[]")

    @links.setter
    def links(self, values):
        self.links_json = json.dumps(list(values or []))

    def to_dict(self):
        return {
            "campaignId": self.campaign_id,
            "campaignName": self.campaign_name,
            "sentAt": self.sent_at.isoformat() if self.sent_at else None,
            "openedAt": self.opened_at.isoformat() if self.opened_at else None,
            "clickedAt": self.clicked_at.isoformat() if self.clicked_at else None,
            "links": self.links,
        }


class NewsletterBounce(db.Model):
    __tablename__ = "newsletter_bounces"

    id = db.Column(db.Integer, primary_key=True)
    subscriber_id = db.Column(db.Integer, db.ForeignKey("newsletter_subscribers.id"), nullable=False, index=True)

    bounce_type = db.Column(db.String(10), nullable=False)  # hard, soft
    reason = db.Column(db.String(500), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    subscriber = db.relationship("NewsletterSubscriber", back_populates="bounces")


@event.listens_for(NewsletterSubscriber, "before_insert")
@event.listens_for(NewsletterSubscriber, "before_update")
def _default_interests(mapper, connection, target):
    if target.status == "active" and not target.interests:
        target.interests = DEFAULT_INTERESTS
