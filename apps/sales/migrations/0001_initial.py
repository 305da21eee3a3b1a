from decimal import Decimal

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Sale',
            fields=[
                ('id', models.CharField(max_length=64, primary_key=True, serialize=False)),
                ('customer_name', models.CharField(max_length=200)),
                ('doctor_name', models.CharField(blank=True, max_length=200)),
                ('sale_date', models.DateTimeField()),
                ('subtotal', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=14)),
                ('discount_percentage', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=7)),
                ('total_amount', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=14)),
                ('payment_mode', models.CharField(choices=[('Cash', 'Cash'), ('Online', 'Online'), ('Card', 'Card'), ('Pending', 'Pending')], default='Cash', max_length=16)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'ordering': ['-sale_date'],
                'indexes': [
                    models.Index(fields=['sale_date'], name='idx_sale_date'),
                    models.Index(fields=['customer_name'], name='idx_sale_customer'),
                ],
            },
        ),
        migrations.CreateModel(
            name='SaleItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('medicine_id', models.CharField(max_length=64)),
                ('name', models.CharField(max_length=200)),
                ('category', models.CharField(max_length=64)),
                ('quantity', models.PositiveIntegerField()),
                ('price_per_unit', models.DecimalField(decimal_places=4, max_digits=14)),
                ('purchase_price_per_unit', models.DecimalField(blank=True, decimal_places=4, max_digits=14, null=True)),
                ('total', models.DecimalField(decimal_places=4, max_digits=14)),
                ('position', models.PositiveIntegerField(default=0)),
                ('sale', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='sales.sale')),
            ],
            options={
                'ordering': ['position'],
            },
        ),
    ]
